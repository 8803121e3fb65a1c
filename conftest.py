import pytest

from state.models import Quote


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    """Keep quote/report caches out of the working tree."""
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("CONSULTANT_CACHE_DIR", str(cache_dir))
    return cache_dir


@pytest.fixture
def quote():
    def _make(symbol: str, price: float = 100.0, change_percent: float = 0.5) -> Quote:
        return Quote(symbol=symbol, name=f"{symbol} Inc", price=price, change_percent=change_percent)
    return _make
