import logging
import sys
from typing import Optional

from fastapi import FastAPI, Response, status
from pydantic import BaseModel, EmailStr, Field

logging.basicConfig(stream=sys.stdout, level=logging.INFO, format="%(asctime)sZ %(levelname)s %(message)s")

app = FastAPI(title="Kinote SMTP Mock", version="1.0.0")

# last messages per recipient, handy when clicking through a signup by hand
_outbox: dict[str, list[dict]] = {}


class SendEmail(BaseModel):
    sender: Optional[str] = Field(default=None, alias="from")
    to: EmailStr
    subject: str
    body: str


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/send", status_code=status.HTTP_202_ACCEPTED)
async def send(payload: SendEmail) -> Response:
    logging.info("SMTP-MOCK send from=%s to=%s subject=%r", payload.sender, payload.to, payload.subject)
    logging.info("SMTP-MOCK body=%r", payload.body)
    messages = _outbox.setdefault(str(payload.to).lower(), [])
    messages.append(payload.model_dump(by_alias=True))
    del messages[:-10]
    return Response(status_code=status.HTTP_202_ACCEPTED)


@app.get("/messages/{address}")
def messages(address: str) -> list[dict]:
    return _outbox.get(address.strip().lower(), [])
