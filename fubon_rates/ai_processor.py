"""Exchange rate extraction through OpenRouter-hosted models with web search."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

import openai
from openai import OpenAI

from .config import Config
from .models import Citation, ErrorKind, FetchResult, RateRecord, RATE_FIELDS

logger = logging.getLogger(__name__)


class ExtractionError(RuntimeError):
    """Raised when the completion service cannot produce a rate table."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class CredentialError(ExtractionError):
    """Raised when OpenRouter rejects the configured API key."""

    kind = ErrorKind.CREDENTIAL


class MissingCredentialError(CredentialError):
    """Raised when no API key is configured at all."""

    kind = ErrorKind.MISSING_CREDENTIAL


class QuotaExceededError(ExtractionError):
    """Raised when the provider answers with HTTP 429."""

    kind = ErrorKind.QUOTA


class TransportError(ExtractionError):
    kind = ErrorKind.TRANSPORT


class EmptyResponseError(ExtractionError):
    kind = ErrorKind.EMPTY_RESPONSE


MISSING_CREDENTIAL_MESSAGE = "未偵測到有效的 API Key。請確保環境變數已正確設定。"
INVALID_CREDENTIAL_MESSAGE = "API Key 無效或沒有權限，請檢查 OPENROUTER_API_KEY 設定。"
QUOTA_MESSAGE = "API 使用額度已達上限，請稍後再試。"
TRANSPORT_MESSAGE = "無法從富邦銀行擷取最新匯率，請稍後再試。"
EMPTY_RESPONSE_MESSAGE = "模型未回傳任何內容，請稍後再試。"

RATE_TABLE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "timestamp": {"type": "string", "description": "數據更新時間"},
        "rates": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {name: {"type": "string"} for name in RATE_FIELDS},
                "required": list(RATE_FIELDS),
                "additionalProperties": False,
            },
        },
    },
    "required": ["timestamp", "rates"],
    "additionalProperties": False,
}


class AIProcessor:
    """Ask an OpenRouter model to read the bank's published rate table."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        web_search: Optional[bool] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key or Config.get_openrouter_api_key()
        self.model = model or Config.OPENROUTER_MODEL
        self.web_search = Config.WEB_SEARCH_ENABLED if web_search is None else web_search
        self.source_url = Config.FUBON_RATE_URL

        if not self.api_key:
            raise MissingCredentialError(MISSING_CREDENTIAL_MESSAGE)

        self.client = client or OpenAI(
            base_url=Config.OPENROUTER_BASE_URL,
            api_key=self.api_key,
            timeout=Config.AI_REQUEST_TIMEOUT,
            default_headers=Config.get_openrouter_headers(),
        )

    def fetch_latest_rates(self) -> FetchResult:
        """Fetch and normalise the current rate table."""

        response = self._invoke_model(self._create_prompt())
        message = response.choices[0].message if response.choices else None
        result_text = (message.content or "").strip() if message else ""

        if not result_text:
            logger.warning("AI response for %s was empty", Config.BANK_NAME)
            raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)

        payload = self._parse_payload(result_text)
        rows = self._parse_rows(payload)
        timestamp = payload.get("timestamp")
        if not isinstance(timestamp, str) or not timestamp.strip():
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        citations = self._extract_citations(message)
        logger.info(
            "Extracted %s rate rows (%s citations) for %s",
            len(rows),
            len(citations),
            Config.BANK_NAME,
        )
        return FetchResult(
            announced_timestamp=timestamp.strip(),
            rows=rows,
            source_url=self.source_url,
            citations=citations,
        )

    def _invoke_model(self, prompt: str):
        system_message = (
            "You read public bank web pages and return their foreign exchange "
            "rate tables as JSON matching the provided schema."
        )
        request_payload: Dict[str, Any] = dict(
            model=self.model,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": prompt},
            ],
            temperature=0.1,
            max_tokens=4000,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "fx_rate_table",
                    "strict": True,
                    "schema": RATE_TABLE_SCHEMA,
                },
            },
        )
        if self.web_search:
            request_payload["extra_body"] = {"plugins": [{"id": "web"}]}

        try:
            return self.client.chat.completions.create(**request_payload)
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            logger.error("OpenRouter rejected the API key: %s", exc)
            raise CredentialError(INVALID_CREDENTIAL_MESSAGE) from exc
        except openai.RateLimitError as exc:
            logger.warning("OpenRouter quota exceeded: %s", exc)
            raise QuotaExceededError(QUOTA_MESSAGE) from exc
        except openai.APIStatusError as exc:
            if exc.status_code == 402:
                logger.warning("OpenRouter credits exhausted: %s", exc)
                raise QuotaExceededError(QUOTA_MESSAGE) from exc
            logger.error("OpenRouter request failed: %s", exc)
            raise TransportError(TRANSPORT_MESSAGE) from exc
        except openai.APIConnectionError as exc:
            logger.error("OpenRouter request failed: %s", exc)
            raise TransportError(TRANSPORT_MESSAGE) from exc

    def _create_prompt(self) -> str:
        return (
            f"請幫我抓取{Config.BANK_NAME}最新的外幣匯率資訊。\n"
            f"網址：{self.source_url}\n\n"
            "每一種幣別都需要以下六個欄位：\n"
            "1. currency：幣別名稱 (例如: 美金, 日圓)\n"
            "2. currencyCode：幣別代碼 (例如: USD, JPY)\n"
            "3. cashBuy：現鈔買入匯率\n"
            "4. cashSell：現鈔賣出匯率\n"
            "5. spotBuy：即期買入匯率\n"
            "6. spotSell：即期賣出匯率\n\n"
            "- 沒有報價的欄位請填入 \"-\"，不可留空。\n"
            "- timestamp 請填入網頁公告的掛牌時間。\n"
            "- 依照網頁上的順序列出所有幣別，並確保數據是最新的。\n"
            "- 只回傳符合 schema 的 JSON。"
        )

    @staticmethod
    def _extract_json_block(response_text: str) -> str:
        """Extract a JSON block from Markdown fenced code if necessary."""

        if "```json" in response_text:
            return response_text.split("```json", 1)[1].split("```", 1)[0].strip()
        if "```" in response_text:
            return response_text.split("```", 1)[1].split("```", 1)[0].strip()
        return response_text

    def _parse_payload(self, result_text: str) -> Dict[str, Any]:
        try:
            parsed = json.loads(self._extract_json_block(result_text))
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse AI response as JSON: %s", exc)
            logger.debug("Raw AI response: %s", result_text[:500])
            return {}

        if not isinstance(parsed, dict):
            logger.warning("AI response was not a JSON object")
            return {}
        return parsed

    @staticmethod
    def _parse_rows(payload: Mapping[str, Any]) -> Tuple[RateRecord, ...]:
        rates = payload.get("rates")
        if not isinstance(rates, list):
            logger.warning("AI response has no usable 'rates' array; treating as empty")
            return ()

        rows: List[RateRecord] = []
        for item in rates:
            if not isinstance(item, dict):
                logger.debug("Skipping non-object rate entry: %r", item)
                continue
            rows.append(RateRecord.from_payload(item))
        return tuple(rows)

    @staticmethod
    def _extract_citations(message: Any) -> Tuple[Citation, ...]:
        """Collect ``url_citation`` annotations attached by the web plugin."""

        annotations = _field(message, "annotations") or []
        citations: List[Citation] = []
        for annotation in annotations:
            if _field(annotation, "type") != "url_citation":
                continue
            detail = _field(annotation, "url_citation") or {}
            uri = _field(detail, "url")
            if not uri:
                continue
            citations.append(Citation(title=_field(detail, "title"), uri=uri))
        return tuple(citations)


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def fetch_latest_rates() -> FetchResult:
    """Fetch the latest rate table with the default configuration."""

    return AIProcessor().fetch_latest_rates()
