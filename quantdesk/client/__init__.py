"""
客户端 - 消费 stock-data HTTP 接口
"""

from quantdesk.client.stock_data_client import StockDataClient

__all__ = ["StockDataClient"]
