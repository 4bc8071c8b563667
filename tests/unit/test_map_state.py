from map_orchestrator.models.map_models import CameraTarget, GeoPoint, MapMarker, MapState
from map_orchestrator.services.map_state import MapStateStore


def _marker(label="A"):
    return MapMarker(GeoPoint(25.0, 55.0, 1.0), label)


def test_initial_state_is_empty():
    state = MapStateStore().get_state()
    assert state == MapState()
    assert state.to_dict() == {
        "markers": [],
        "cameraTarget": None,
        "preventAutoFrame": False,
        "generation": 0,
    }


def test_marker_write_advances_generation_even_when_equal(store):
    store.set_markers([_marker()])
    store.set_markers([_marker()])
    assert store.generation == 2


def test_non_marker_writes_keep_generation(store):
    store.set_camera_target(CameraTarget(GeoPoint(25.0, 55.0), range=1000))
    store.set_prevent_auto_frame(True)
    assert store.generation == 0


def test_apply_notifies_once(store):
    seen = []
    store.subscribe(lambda state, previous: seen.append((state, previous)))
    store.apply(markers=[_marker()], prevent_auto_frame=True)
    assert len(seen) == 1
    state, previous = seen[0]
    assert state.prevent_auto_frame is True
    assert previous.markers == ()


def test_empty_apply_is_a_no_op(store):
    seen = []
    store.subscribe(lambda state, previous: seen.append(state))
    store.apply()
    assert seen == []


def test_unsubscribe(store):
    seen = []
    unsubscribe = store.subscribe(lambda state, previous: seen.append(state))
    unsubscribe()
    store.clear_markers()
    assert seen == []


def test_failing_listener_does_not_block_others(store):
    seen = []

    def broken(state, previous):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda state, previous: seen.append(state))
    store.clear_markers()
    assert len(seen) == 1


def test_commit_if_current_drops_stale_update(store):
    token = store.begin_marker_write()
    store.set_markers([_marker("newer")])
    assert store.commit_if_current(token, markers=[_marker("older")]) is False
    assert store.get_state().markers[0].label == "newer"


def test_commit_if_current_applies_fresh_update(store):
    token = store.begin_marker_write()
    assert store.commit_if_current(token, markers=[_marker()]) is True
    assert len(store.get_state().markers) == 1


def test_reset_clears_state_and_invalidates_tokens(store):
    store.set_markers([_marker()])
    token = store.begin_marker_write()
    store.reset()
    state = store.get_state()
    assert state.markers == ()
    assert state.camera_target is None
    assert not store.is_current(token)


def test_listener_writes_reach_later_listeners_in_order(store):
    target = CameraTarget(GeoPoint(25.0, 55.0), range=1000)

    def consume_target(state, previous):
        if state.camera_target is not None:
            store.apply(camera_target=None, prevent_auto_frame=False)

    seen = []
    store.subscribe(consume_target)
    store.subscribe(lambda state, previous: seen.append((previous.camera_target, state.camera_target)))

    store.apply(camera_target=target, prevent_auto_frame=True)

    assert seen == [(None, target), (target, None)]
    state = store.get_state()
    assert state.camera_target is None
    assert state.prevent_auto_frame is False


def test_queued_marker_write_advances_generation_at_commit(store):
    def follow_up(state, previous):
        if state.generation == 1:
            store.set_markers([_marker("second")])

    generations = []
    store.subscribe(follow_up)
    store.subscribe(lambda state, previous: generations.append(state.generation))

    store.set_markers([_marker("first")])

    assert generations == [1, 2]
    assert store.get_state().markers[0].label == "second"
