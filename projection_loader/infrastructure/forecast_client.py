import json
import re
import time
from typing import Any, Optional, Tuple

import httpx
from projection_loader.domain.dto import ForecastResult
from projection_loader.domain.exceptions import ForecastRequestError
from projection_loader.infrastructure.config import ForecastConfig


# The prediction service emits bare NaN where a number is missing
_NAN_TOKEN = re.compile(r"(?<![\w\"])NaN(?![\w\"])")


def normalize_nan(text: str) -> str:
    """Replace every standalone `NaN` token with `null`."""
    return _NAN_TOKEN.sub("null", text)


def decode_forecast_body(text: str) -> Any:
    """Decode a forecast response body, unwrapping one level of JSON string encoding."""
    data = json.loads(normalize_nan(text))
    if isinstance(data, str):
        data = json.loads(normalize_nan(data))
    return data


class ForecastClient:
    """Calls the external prediction endpoint for one producer-orchard/fruit pair."""

    def __init__(self, config: ForecastConfig, client: Optional[httpx.Client] = None) -> None:
        self.config = config
        self.client = client or httpx.Client(timeout=config.timeout_seconds)

    def request_forecast(
            self,
            path: str,
            season: str,
            producer_orchard_code: str,
            fruit_name: str) -> Tuple[ForecastResult, int]:
        """
        Request a forecast and return (result, elapsed_ms) tuple.

        Raises:
            ForecastRequestError: on transport failure, non-2xx status or a
                body that is not a valid forecast after NaN normalization
        """
        payload = {
            "path": path,
            "season": season,
            "provider_code": producer_orchard_code,
            "fruit_name": fruit_name,
        }
        start = time.perf_counter()

        try:
            r = self.client.post(self.config.url, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ForecastRequestError(
                f"Forecast service returned {exc.response.status_code} for {producer_orchard_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ForecastRequestError(f"Forecast request failed for {producer_orchard_code}: {exc}") from exc

        try:
            result = ForecastResult.model_validate(decode_forecast_body(r.text))
        except Exception as exc:
            raise ForecastRequestError(f"Malformed forecast payload for {producer_orchard_code}: {exc}") from exc

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return result, elapsed_ms

    def close(self) -> None:
        self.client.close()
