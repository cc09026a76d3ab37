"""
Custom Domain Management API

Lets a broker:
  1. See the current claim and the DNS targets to configure
  2. Claim a domain (normalized, checked and verified once)
  3. Re-run DNS verification after changing their records
"""
import logging
from typing import Any, Union

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api import deps
from app.config import settings
from app.crud import crud_custom_domain
from app.models.broker import BrokerProfile
from app.schemas.custom_domain import (
    DnsDetails,
    DomainActivated,
    DomainClaim,
    DomainInfo,
    DomainPending,
)
from app.services import dns_verifier
from app.services.domain_claims import (
    DomainOutcome,
    DomainTakenError,
    DomainValidationError,
    NoDomainToVerifyError,
    claim_domain,
    reverify_domain,
)

router = APIRouter()
logger = logging.getLogger("imobhub.custom_domain")

MSG_ACTIVATED = "Domínio ativado com sucesso!"
MSG_PENDING = "DNS ainda não propagado."


def _to_response(outcome: DomainOutcome) -> Union[DomainPending, DomainActivated]:
    if outcome.ok:
        return DomainActivated(
            ok=True,
            domain=outcome.domain,
            status=outcome.status.value,
            mensagem=MSG_ACTIVATED,
        )
    return DomainPending(
        ok=False,
        domain=outcome.domain,
        status=outcome.status.value,
        mensagem=MSG_PENDING,
        dnsDetalhes=DnsDetails(**outcome.check.as_details()),
    )


@router.get("", response_model=DomainInfo)
def get_domain(
    db: Session = Depends(deps.get_db),
    broker: BrokerProfile = Depends(deps.get_current_broker),
) -> Any:
    """Domínio do corretor autenticado e os alvos de DNS esperados"""
    record = crud_custom_domain.get_by_owner(db, broker.owner_id)
    return DomainInfo(
        domain=record.domain if record else None,
        status=record.status.value if record else None,
        verifiedAt=record.verified_at if record else None,
        lastCheckedAt=record.last_checked_at if record else None,
        expectedCname=settings.PLATFORM_CANONICAL_HOST,
        expectedIp=settings.PLATFORM_TARGET_IP,
    )


@router.post("/salvar", response_model=Union[DomainPending, DomainActivated])
def save_domain(
    body: DomainClaim,
    db: Session = Depends(deps.get_db),
    broker: BrokerProfile = Depends(deps.require_custom_domain_plan),
) -> Any:
    """Salva o domínio do corretor e faz a primeira verificação de DNS"""
    try:
        outcome = claim_domain(
            db,
            owner_id=broker.owner_id,
            raw_domain=body.dominio,
            verifier=dns_verifier.verify_domain,
        )
    except DomainValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    except DomainTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Domínio já está em uso por outro corretor",
        )
    return _to_response(outcome)


@router.post("/verificar", response_model=Union[DomainPending, DomainActivated])
def verify_domain(
    db: Session = Depends(deps.get_db),
    broker: BrokerProfile = Depends(deps.require_custom_domain_plan),
) -> Any:
    """Verifica novamente o DNS do domínio já salvo"""
    try:
        outcome = reverify_domain(db, owner_id=broker.owner_id, verifier=dns_verifier.verify_domain)
    except NoDomainToVerifyError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return _to_response(outcome)
