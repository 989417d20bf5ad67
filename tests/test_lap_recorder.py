def test_lap_while_stopped_is_ignored(engine, laps) -> None:
    assert laps.record_lap() is False
    assert laps.laps == ()


def test_laps_are_recorded_newest_first(engine, scheduler, laps) -> None:
    engine.start()
    for elapsed in (100, 250, 400):
        scheduler.advance(elapsed - engine.state.elapsed_ms)
        assert laps.record_lap() is True

    assert laps.laps == (400, 250, 100)
    assert laps.numbered() == [(3, 400), (2, 250), (1, 100)]


def test_lap_after_stop_is_ignored(engine, scheduler, laps) -> None:
    engine.start()
    scheduler.advance(100)
    laps.record_lap()
    engine.stop()

    laps.record_lap()

    assert laps.laps == (100,)


def test_laps_survive_stop_and_clear_only_on_reset(engine, scheduler, laps) -> None:
    engine.start()
    scheduler.advance(70)
    laps.record_lap()
    engine.stop()
    engine.start()
    scheduler.advance(30)
    laps.record_lap()

    assert laps.laps == (100, 70)

    engine.reset()
    assert laps.laps == ()
    assert laps.numbered() == []


def test_lap_subscribers_receive_updates(engine, scheduler, laps, app_state) -> None:
    received = []
    app_state.subscribe_laps(received.append)
    engine.start()
    scheduler.advance(20)
    laps.record_lap()
    engine.reset()

    assert received == [(), (20,), ()]
