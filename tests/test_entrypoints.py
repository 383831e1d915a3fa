from typing import Any

import pytest

import carlot.__main__ as module_main
import carlot.main as main


def test_module_entrypoint_calls_main_entry(monkeypatch: Any) -> None:
    calls: list[str] = []
    monkeypatch.setattr(module_main, "main_entry", lambda: calls.append("main_entry"))
    module_main.main()
    assert calls == ["main_entry"]


def test_main_entry_exits_with_run_status(monkeypatch: Any) -> None:
    monkeypatch.setattr(main, "run", lambda: 1)
    with pytest.raises(SystemExit) as excinfo:
        main.main_entry()
    assert excinfo.value.code == 1
