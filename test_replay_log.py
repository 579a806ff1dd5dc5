"""
Tests for the terminal replay log.
"""

import io

from replay import ReplayConfig, ReplayEngine, load_mission
from replay_log import TerminalLogView, run


def test_one_loop_prints_every_event_once(capsys):
    mission = load_mission(None).mission
    engine = ReplayEngine(mission, ReplayConfig(speed=60))
    out = io.StringIO()
    view = TerminalLogView(out)
    engine.attach(view)
    engine.boot()

    run(engine, view, loops=1, fps=30, realtime=False)

    text = out.getvalue()
    assert "Replay initialized." in text
    assert text.count("KILL: TARGET DESTROYED.") == 1
    assert engine.clock.epoch == 1
    assert view.final_frame.status == "END"
    assert view.final_frame.counters.kills == 1
    assert "kills 1" in view.summary()
    assert "Epoch 1" in capsys.readouterr().out
