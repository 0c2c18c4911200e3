from __future__ import annotations

import threading

from bundlehost.core.build import BuildStatus, BuildTracker, BundleAsset


def test_idle_tracker_is_ready_immediately(tracker: BuildTracker, html_asset: BundleAsset) -> None:
    ready = tracker.when_ready()

    assert ready.done()
    assert ready.result() == BuildStatus(pending=False, errored=False, main_asset=html_asset)


def test_when_ready_waits_for_pending_build(tracker: BuildTracker) -> None:
    tracker.start_build()
    ready = tracker.when_ready()

    assert tracker.status().pending is True
    assert not ready.done()

    tracker.complete_build()

    assert ready.done()
    assert ready.result().pending is False


def test_completion_is_broadcast_to_every_waiter(tracker: BuildTracker) -> None:
    tracker.start_build()
    waiters = [tracker.when_ready() for _ in range(5)]

    # All requests queued behind one build share the same one-shot signal.
    assert all(w is waiters[0] for w in waiters)

    tracker.complete_build()

    assert all(w.done() for w in waiters)


def test_waiting_threads_all_resume_on_one_completion(tracker: BuildTracker) -> None:
    tracker.start_build()
    results: list[BuildStatus] = []
    lock = threading.Lock()

    def _wait() -> None:
        status = tracker.when_ready().result(timeout=5)
        with lock:
            results.append(status)

    threads = [threading.Thread(target=_wait) for _ in range(4)]
    for t in threads:
        t.start()

    tracker.complete_build()
    for t in threads:
        t.join(timeout=5)

    assert len(results) == 4
    assert all(not r.pending for r in results)


def test_each_build_cycle_gets_a_fresh_signal(tracker: BuildTracker) -> None:
    tracker.start_build()
    first = tracker.next_build_complete()
    tracker.complete_build()

    tracker.start_build()
    second = tracker.next_build_complete()

    assert first.done()
    assert second is not first
    assert not second.done()


def test_start_build_twice_keeps_the_same_cycle(tracker: BuildTracker) -> None:
    tracker.start_build()
    first = tracker.next_build_complete()
    tracker.start_build()

    assert tracker.next_build_complete() is first


def test_fail_build_marks_status_errored(tracker: BuildTracker) -> None:
    tracker.start_build()
    ready = tracker.when_ready()

    tracker.fail_build("SyntaxError in app.js")

    status = ready.result()
    assert status.errored is True
    assert status.error == "SyntaxError in app.js"
    assert tracker.status().errored is True


def test_successful_build_clears_previous_error(tracker: BuildTracker) -> None:
    tracker.fail_build("broken")
    tracker.start_build()
    tracker.complete_build()

    assert tracker.status().errored is False
    assert tracker.status().error is None


def test_complete_build_replaces_main_asset(tracker: BuildTracker) -> None:
    rebuilt = BundleAsset(type="html", name="index.html", hashed_name="index.ffff.html")
    tracker.start_build()

    status = tracker.complete_build(rebuilt)

    assert status.main_asset is rebuilt
    assert tracker.status().main_asset is rebuilt


def test_on_next_build_complete_fires_once(tracker: BuildTracker) -> None:
    calls: list[BuildStatus] = []
    tracker.on_next_build_complete(calls.append)

    tracker.start_build()
    tracker.complete_build()
    tracker.start_build()
    tracker.complete_build()

    assert len(calls) == 1


def test_bundle_asset_name_variants() -> None:
    asset = BundleAsset(type="html", name="index.html", hashed_name="index.a1b2.html")

    assert asset.generate_bundle_name() == "index.html"
    assert asset.generate_bundle_name(True) == "index.a1b2.html"
    assert BundleAsset(type="js", name="main.js").generate_bundle_name(True) == "main.js"


def test_bundle_asset_from_entry_derives_type() -> None:
    assert BundleAsset.from_entry("index.html").type == "html"
    assert BundleAsset.from_entry("/app/main.js") == BundleAsset(type="js", name="app/main.js")
