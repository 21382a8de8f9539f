import emtflash.__main__ as module_main


def test_module_entrypoint_calls_main_entry(monkeypatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(module_main, "main_entry", lambda: calls.append("main_entry"))
    module_main.main()
    assert calls == ["main_entry"]
