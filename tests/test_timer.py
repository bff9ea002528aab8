from block_drop.game.timer import TickTimer


def test_stopped_timer_never_fires():
    timer = TickTimer(100)
    assert not timer.pop_due(1000)


def test_fires_once_per_interval():
    timer = TickTimer(100)
    timer.start()
    assert not timer.pop_due(60)
    assert timer.pop_due(60)
    assert not timer.pop_due()
    assert timer.pop_due(250)
    assert timer.pop_due()
    assert not timer.pop_due()


def test_shorter_interval_carries_at_most_one_period():
    timer = TickTimer(400)
    timer.start()
    timer.pop_due(390)
    timer.set_interval(15)
    assert timer.pop_due()
    assert not timer.pop_due()


def test_stop_discards_accumulated_time():
    timer = TickTimer(100)
    timer.start()
    timer.pop_due(90)
    timer.stop()
    timer.start()
    assert not timer.pop_due(20)
