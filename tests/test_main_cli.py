from __future__ import annotations

import json
import sys

import pytest

import main
from config import MILK_BATCH_COST, STARTING_FUNDS


def test_headless_run_prints_summary(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["main.py", "--ticks", "50", "--seed", "3"])

    main.main()

    out = capsys.readouterr().out
    assert out.startswith("headless_done t=5.0 day=1")
    assert "kpi[" in out
    assert "economy[" in out


def test_json_flag_prints_snapshot(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["main.py", "--ticks", "20", "--json"])

    main.main()

    state = json.loads(capsys.readouterr().out)
    assert state["stats"]["day"] == 1
    assert "baristas" in state


def test_missing_decisions_file_is_startup_error(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(sys, "argv", ["main.py", "--decisions", str(tmp_path / "missing.json")])

    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
    assert "Startup error:" in capsys.readouterr().err


def test_non_list_decisions_file_is_rejected(tmp_path):
    path = tmp_path / "decisions.json"
    path.write_text(json.dumps({"at": 0}))

    with pytest.raises(ValueError):
        main.load_decisions(path)


def test_load_decisions_sorts_and_skips_bad_entries(tmp_path):
    path = tmp_path / "decisions.json"
    path.write_text(json.dumps([{"at": 5}, "junk", {"at": "soon"}, {"at": 1, "thought": "x"}, {}]))

    decisions = main.load_decisions(path)

    assert [d["at"] for d in decisions] == [0.0, 1.0, 5.0]


def test_run_headless_applies_due_decisions():
    decisions = [{"at": 0.0, "thought": "Restock milk", "actions": [{"type": "order_milk"}]}]

    sim = main.run_headless(ticks=50, dt=0.1, seed=7, decisions=decisions)

    assert sim.ledger.funds == STARTING_FUNDS - MILK_BATCH_COST
    assert len(sim.deliveries) == 1
    assert any(t["text"] == "Restock milk" for t in sim.thoughts())
