"""
Services Package

Long-running and presentation services built on the aggregation core:
- RankBoard: periodic batch refresh, FDV ranking and publication
- GasTracker: eth_gasPrice across L1/L2 RPC endpoints
- formatting: plain-text rendering of the board and gas prices
"""
