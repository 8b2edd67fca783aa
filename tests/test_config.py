from blockstock.core.config import _env_bool, _env_int, _env_list


def test_env_bool(monkeypatch) -> None:
    monkeypatch.delenv("BLOCKSTOCK_FLAG", raising=False)
    assert _env_bool("BLOCKSTOCK_FLAG", True) is True

    for raw in ("1", "true", " YES ", "on"):
        monkeypatch.setenv("BLOCKSTOCK_FLAG", raw)
        assert _env_bool("BLOCKSTOCK_FLAG", False) is True

    monkeypatch.setenv("BLOCKSTOCK_FLAG", "off")
    assert _env_bool("BLOCKSTOCK_FLAG", True) is False


def test_env_int(monkeypatch) -> None:
    monkeypatch.delenv("BLOCKSTOCK_NUMBER", raising=False)
    assert _env_int("BLOCKSTOCK_NUMBER", 50) == 50

    monkeypatch.setenv("BLOCKSTOCK_NUMBER", "12")
    assert _env_int("BLOCKSTOCK_NUMBER", 50) == 12

    monkeypatch.setenv("BLOCKSTOCK_NUMBER", "twelve")
    assert _env_int("BLOCKSTOCK_NUMBER", 50) == 50

    monkeypatch.setenv("BLOCKSTOCK_NUMBER", "-5")
    assert _env_int("BLOCKSTOCK_NUMBER", 50, min_value=0) == 0


def test_env_list(monkeypatch) -> None:
    monkeypatch.delenv("BLOCKSTOCK_SIZES", raising=False)
    assert _env_list("BLOCKSTOCK_SIZES", "4 inch,6 inch") == ("4 inch", "6 inch")

    monkeypatch.setenv("BLOCKSTOCK_SIZES", " 5 inch , ,10 inch ")
    assert _env_list("BLOCKSTOCK_SIZES", "4 inch") == ("5 inch", "10 inch")
