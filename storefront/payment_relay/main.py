# storefront/payment_relay/main.py
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
import uvicorn

from storefront.domain.schemas import InitiatePaymentIn, InitiatePaymentOut
from storefront.services.gateway_client import GatewayClient
from storefront.services.payment_relay_service import PaymentRelayService, RelayError
from storefront.services.transaction_ledger import build_ledger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def get_relay_service(request: Request) -> PaymentRelayService:
    return PaymentRelayService(
        ledger=request.app.state.ledger,
        gateway=request.app.state.gateway,
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Payment Relay", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.ledger = build_ledger()
    app.state.gateway = GatewayClient()

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/initiate-payment", response_model=InitiatePaymentOut)
    def initiate_payment(
        payload: InitiatePaymentIn,
        svc: PaymentRelayService = Depends(get_relay_service),
    ):
        try:
            payment_url = svc.initiate(
                amount=payload.amount,
                product_code=payload.product_id,
                success_url=payload.success_url,
                failure_url=payload.failure_url,
            )
        except RelayError as e:
            return JSONResponse(status_code=500, content={"error": str(e)})
        return {"payment_url": payment_url}

    @app.get("/verify-payment")
    def verify_payment(
        data: str | None = Query(None),
        svc: PaymentRelayService = Depends(get_relay_service),
    ):
        return RedirectResponse(svc.verify(data), status_code=302)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=3001)
