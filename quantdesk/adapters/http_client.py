"""
HTTP 客户端 - 上游 JSON 接口的统一访问

所有上游请求都带超时；网络错误、非 2xx 响应和无法解析的响应体
统一转换为 DataUnavailableError，由调用方决定如何降级。
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from quantdesk.infrastructure.concurrency import CancellationToken, check_cancelled
from quantdesk.ports.interfaces import DataUnavailableError, UpstreamTimeoutError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 8.0


def encode_path_segment(value: str) -> str:
    """对 URL 路径片段进行编码"""
    return quote(value, safe="")


class HttpClient:
    """
    基于 requests.Session 的 JSON 客户端

    Session 可注入，便于复用连接池和在测试中替换。
    """

    def __init__(
        self,
        base_url: str,
        source: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化客户端

        Args:
            base_url: 接口根地址
            source: 数据源名称（用于日志与异常）
            headers: 默认请求头
            timeout: 单次请求超时（秒）
            session: 可选的 requests.Session
        """
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        token: Optional[CancellationToken] = None,
    ) -> Any:
        """
        发起 GET 请求并解析 JSON

        Raises:
            OperationCancelledError: 请求前或响应返回后令牌已取消
            UpstreamTimeoutError: 请求超时
            DataUnavailableError: 网络错误、非 2xx 或响应无法解析
        """
        check_cancelled(token, f"{self.source} {path}")
        url = f"{self.base_url}{path}"

        try:
            response = self.session.get(
                url,
                params=params,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            raise UpstreamTimeoutError(
                f"请求超时（{self.timeout}秒）: {path}",
                source=self.source
            )
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise DataUnavailableError(
                f"上游返回 {status}: {path}",
                source=self.source
            )
        except requests.exceptions.RequestException as e:
            raise DataUnavailableError(
                f"请求失败: {path}: {e}",
                source=self.source
            )
        except ValueError as e:
            raise DataUnavailableError(
                f"响应解析失败: {path}: {e}",
                source=self.source
            )

        # 等待响应期间被取消时丢弃结果
        check_cancelled(token, f"{self.source} {path}")
        return data

    def close(self) -> None:
        self.session.close()
