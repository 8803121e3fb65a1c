"""
Offline market snapshot + sample portfolio.

Used when --mock is passed, and as the last fallback when a live quote fetch
fails and no cached snapshot exists.

Quotes cover the BSE names the dashboard tracks plus the US large caps
the consultant's sector table knows about.
"""
from state.models import Holding, MarketIndex, Quote

MOCK_QUOTES: list[Quote] = [
    # BSE
    Quote(
        symbol="RELIANCE.BSE",
        name="Reliance Industries",
        price=2825.65,
        change=12.3,
        change_percent=0.44,
        volume=4_829_300,
        market_cap=19_845_000_000_000,
    ),
    Quote(
        symbol="TCS.BSE",
        name="Tata Consultancy Services",
        price=3825.40,
        change=-10.2,
        change_percent=-0.27,
        volume=1_543_200,
        market_cap=14_050_000_000_000,
    ),
    Quote(
        symbol="INFY.BSE",
        name="Infosys Ltd",
        price=1689.50,
        change=8.4,
        change_percent=0.50,
        volume=2_320_000,
        market_cap=7_420_000_000_000,
    ),
    # US large caps
    Quote(symbol="AAPL",  name="Apple Inc",              price=189.84, change=1.21,   change_percent=0.64,  volume=52_164_500),
    Quote(symbol="MSFT",  name="Microsoft Corp",         price=415.50, change=-2.10,  change_percent=-0.50, volume=18_320_100),
    Quote(symbol="GOOGL", name="Alphabet Inc",           price=172.63, change=3.95,   change_percent=2.34,  volume=24_005_700),
    Quote(symbol="AMZN",  name="Amazon.com Inc",         price=183.32, change=-0.88,  change_percent=-0.48, volume=35_871_900),
    Quote(symbol="NVDA",  name="NVIDIA Corp",            price=887.89, change=-27.42, change_percent=-3.00, volume=41_223_800),
    Quote(symbol="TSLA",  name="Tesla Inc",              price=175.79, change=-4.32,  change_percent=-2.40, volume=96_512_300),
    Quote(symbol="META",  name="Meta Platforms Inc",     price=493.50, change=6.07,   change_percent=1.25,  volume=13_908_400),
    Quote(symbol="V",     name="Visa Inc",               price=276.98, change=0.83,   change_percent=0.30,  volume=5_411_600),
]

MOCK_INDICES: list[MarketIndex] = [
    MarketIndex(symbol="^NSEI",  name="Nifty 50", value=22_045.60, change=124.5, change_percent=0.57),
    MarketIndex(symbol="^BSESN", name="Sensex",   value=73_245.80, change=250.3, change_percent=0.34),
]

SAMPLE_HOLDINGS: list[Holding] = [
    Holding(symbol="AAPL",  quantity=50, purchase_price=180.00),
    Holding(symbol="MSFT",  quantity=25, purchase_price=395.00),
    Holding(symbol="GOOGL", quantity=15, purchase_price=160.00),
    Holding(symbol="NVDA",  quantity=10, purchase_price=920.00),
]

DEFAULT_SYMBOLS: list[str] = [q.symbol for q in MOCK_QUOTES]
