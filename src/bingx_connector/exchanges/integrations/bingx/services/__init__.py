from .market_mapper import to_markets, to_raw_market, to_spot_market, to_swap_market, split_symbol

__all__ = ['to_markets', 'to_raw_market', 'to_spot_market', 'to_swap_market', 'split_symbol']
