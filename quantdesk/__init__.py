"""
QuantDesk - 行情数据聚合与参考决策

分层结构：
- domain: 领域模型与代码规范化
- ports: 端口接口
- adapters: Yahoo Finance / Naver 证券适配器
- orchestrator: 聚合器
- use_cases: 评分与评估
- infrastructure: 日志、缓存、并发、错误处理
- api: FastAPI 接口
- client: HTTP 客户端
"""

__version__ = "1.0.0"
