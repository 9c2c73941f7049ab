import logging
from urllib.parse import parse_qs

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool

from . import __version__
from .errors import ConfigurationError, OrderBridgeError, ProviderError, SubmissionError
from .log_config import configure_logging
from .models import CreateOrderResult
from .notifications import EmailTransport, LoggingEmailTransport, send_order_email
from .orders import build_order_request, client_ip_from_forwarded, generate_order_number, parse_submission
from .provider import ProviderClient
from .settings import Settings, get_settings

_startup_settings = get_settings()
configure_logging(_startup_settings.log_level, _startup_settings.log_format)

logger = logging.getLogger(__name__)

app = FastAPI(title="Order Bridge", version=__version__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

REJECTED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE"]


def get_provider_client(settings: Settings = Depends(get_settings)) -> ProviderClient:
    return ProviderClient.from_settings(settings)


def get_email_transport() -> EmailTransport:
    return LoggingEmailTransport()


@app.get("/health")
def health():
    return {"ok": True}


@app.options("/create-order")
def create_order_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)


@app.api_route("/create-order", methods=REJECTED_METHODS)
def create_order_method_not_allowed():
    return JSONResponse(status_code=405, content={"error": "Method not allowed"}, headers=CORS_HEADERS)


@app.post("/create-order")
async def create_order(
    request: Request,
    settings: Settings = Depends(get_settings),
    provider: ProviderClient = Depends(get_provider_client),
):
    """
    Create a Mollie order for a checkout submission and hand back the
    checkout URL. Every failure, ours or Mollie's, is answered with 400.
    """
    try:
        if not settings.provider_api_key or not settings.webhook_url:
            raise ConfigurationError("Mollie API key of webhook URL niet geconfigureerd")

        submission = parse_submission(await request.body())
        order_number = generate_order_number()
        client_ip = client_ip_from_forwarded(request.headers.get("x-forwarded-for"))
        order_request = build_order_request(submission, settings, order_number, client_ip)

        order = await provider.create_order(order_request)
        if not order.checkout_url:
            raise ProviderError("Mollie gaf geen checkout URL terug")

        logger.info("Order created: %s - %s", order.id, order_number)
        result = CreateOrderResult(
            order_id=order.id,
            order_number=order_number,
            checkout_url=order.checkout_url,
            amount=str(order.amount.value),
        )
        return JSONResponse(content=result.model_dump(), headers=CORS_HEADERS)

    except OrderBridgeError as e:
        logger.error("Order creation failed: %s", e)
        return _create_order_failure(e)
    except Exception as e:
        logger.exception("Order creation failed unexpectedly")
        return _create_order_failure(e)


def _create_order_failure(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": str(e)}, headers=CORS_HEADERS)


@app.api_route("/webhook", methods=REJECTED_METHODS + ["OPTIONS"])
def webhook_method_not_allowed():
    return PlainTextResponse("Method not allowed", status_code=405)


@app.post("/webhook")
async def webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    provider: ProviderClient = Depends(get_provider_client),
    transport: EmailTransport = Depends(get_email_transport),
):
    """
    Mollie status ping. Always answers 200 so Mollie does not keep retrying;
    failures only end up in the log.
    """
    try:
        if not settings.provider_api_key:
            raise ConfigurationError("Mollie API key niet geconfigureerd")

        order_id = _webhook_order_id(await request.body())
        logger.info("Webhook received for order %s", order_id)

        order = await provider.get_order(order_id)
        logger.info("Webhook: order %s - status %s", order.order_number, order.status)

        if order.status == "paid":
            await run_in_threadpool(send_order_email, order, settings.email_to, transport)

        return PlainTextResponse("OK")

    except Exception:
        logger.exception("Webhook processing failed")
        return PlainTextResponse("Error logged")


def _webhook_order_id(raw: bytes) -> str:
    form = parse_qs(raw.decode("utf-8"))
    order_id = (form.get("id") or [""])[0].strip()
    if not order_id:
        raise SubmissionError("Geen order ID ontvangen")
    return order_id
