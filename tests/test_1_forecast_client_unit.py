import json

import httpx
import pytest

from projection_loader.domain.exceptions import ForecastRequestError
from projection_loader.infrastructure.forecast_client import (
    ForecastClient,
    decode_forecast_body,
    normalize_nan,
)

from fakes import forecast_payload


NAN_BODY = (
    '{"input": {"provider_code": "P1-7", "fruit_name": "APPLE"}, '
    '"output": {"last-date": "2024-01-01", '
    '"future-dates": ["2024-01-08", "2024-01-15", "2024-01-22"], '
    '"human-predictions": [NaN, 12.0, NaN], '
    '"model-predictions": [9.8,NaN,11.1]}}'
)


def make_client(forecast_config, handler) -> ForecastClient:
    return ForecastClient(forecast_config, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_normalize_nan_leaves_strings_untouched():
    assert normalize_nan('[NaN, 1.0, NaN]') == '[null, 1.0, null]'
    assert normalize_nan('{"name": "NaN", "v": NaN}') == '{"name": "NaN", "v": null}'
    assert normalize_nan('{"fruit": "BaNaNa"}') == '{"fruit": "BaNaNa"}'


def test_nan_tokens_become_none(forecast_config):
    """
    A body with bare NaN values must parse, with None in place of every NaN.
    """
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(200, text=NAN_BODY)

    client = make_client(forecast_config, handler)
    result, elapsed_ms = client.request_forecast("s3://bucket/a.csv", "2024-2025", "P1-7", "APPLE")

    assert result.output.human_predictions == [None, 12.0, None]
    assert result.output.model_predictions == [9.8, None, 11.1]
    assert result.input.provider_code == "P1-7"
    assert elapsed_ms >= 0
    assert requests == [{
        "path": "s3://bucket/a.csv",
        "season": "2024-2025",
        "provider_code": "P1-7",
        "fruit_name": "APPLE",
    }]


def test_double_encoded_body_is_unwrapped():
    body = json.dumps(NAN_BODY)
    data = decode_forecast_body(body)

    assert isinstance(data, dict)
    assert data["output"]["human-predictions"] == [None, 12.0, None]


def test_request_is_posted_to_configured_url(forecast_config):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        return httpx.Response(200, json=forecast_payload())

    client = make_client(forecast_config, handler)
    result, _ = client.request_forecast(forecast_config.data_path, forecast_config.season, "P1-7", "APPLE")

    assert seen == {"method": "POST", "url": forecast_config.url}
    assert result.output.future_dates == ["2024-01-08"]


def test_non_2xx_raises(forecast_config):
    client = make_client(forecast_config, lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(ForecastRequestError, match="502"):
        client.request_forecast("p", "s", "P1-7", "APPLE")


def test_transport_failure_raises(forecast_config):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(forecast_config, handler)

    with pytest.raises(ForecastRequestError, match="connection refused"):
        client.request_forecast("p", "s", "P1-7", "APPLE")


@pytest.mark.parametrize(
    "body",
    [
        "not json at all",
        json.dumps({"input": {"provider_code": "P1-7"}}),
        json.dumps(forecast_payload(future_dates=["2024-01-08", "2024-01-15"], human=[1.0], model=[1.0, 2.0])),
    ],
    ids=["invalid-json", "missing-fields", "unequal-lengths"],
)
def test_malformed_payload_raises(forecast_config, body):
    client = make_client(forecast_config, lambda request: httpx.Response(200, text=body))

    with pytest.raises(ForecastRequestError, match="Malformed forecast payload"):
        client.request_forecast("p", "s", "P1-7", "APPLE")



def test_deeply_nested_body_is_a_forecast_error(forecast_config):
    """
    A body nested deeper than the decoder can recurse must still surface as ForecastRequestError.
    """
    client = make_client(forecast_config, lambda request: httpx.Response(200, text="[" * 200000))

    with pytest.raises(ForecastRequestError, match="Malformed forecast payload"):
        client.request_forecast("p", "s", "P1-7", "APPLE")
