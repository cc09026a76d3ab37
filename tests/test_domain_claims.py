"""Claim / re-verify workflow against the registry."""
import pytest

from app.crud import crud_custom_domain
from app.models.custom_domain import CustomDomain, DomainStatus
from app.services.dns_verifier import DnsCheckResult
from app.services.domain_claims import (
    BlockedDomainError,
    DomainRequiredError,
    DomainTakenError,
    InvalidDomainError,
    NoDomainToVerifyError,
    claim_domain,
    reverify_domain,
)
from tests.conftest import CANONICAL, create_broker

OK = DnsCheckResult(ok=True, found=CANONICAL, expected=CANONICAL)
PENDING = DnsCheckResult(ok=False, expected=CANONICAL, found="a.com, b.com", error="mismatch")


class _Verifier:
    def __init__(self, *results):
        self.results = list(results)
        self.domains = []

    def __call__(self, domain):
        self.domains.append(domain)
        return self.results.pop(0)


def test_claim_with_correct_dns_activates(db):
    create_broker(db, owner_id="u-1", slug="joao")
    verifier = _Verifier(OK)

    outcome = claim_domain(db, owner_id="u-1", raw_domain="https://www.MeuSite.com.br/", verifier=verifier)

    assert outcome.ok
    assert outcome.domain == "meusite.com.br"
    assert verifier.domains == ["meusite.com.br"]
    record = crud_custom_domain.get_by_owner(db, "u-1")
    assert record.status == DomainStatus.ACTIVE
    assert record.verified_at is not None
    assert record.verified_at == record.last_checked_at
    assert crud_custom_domain.find_active_by_domain(db, "meusite.com.br").slug == "joao"


def test_claim_with_wrong_dns_is_pending(db):
    outcome = claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(PENDING))

    assert not outcome.ok
    assert outcome.status == DomainStatus.PENDING
    assert outcome.check.found == "a.com, b.com"
    record = crud_custom_domain.get_by_owner(db, "u-1")
    assert record.status == DomainStatus.PENDING
    assert record.verified_at is None
    assert record.last_checked_at is not None
    assert crud_custom_domain.find_active_by_domain(db, "meusite.com.br") is None


@pytest.mark.parametrize(
    "raw,error",
    [
        (None, DomainRequiredError),
        ("   ", DomainRequiredError),
        ("not a domain", InvalidDomainError),
        ("-meusite.com", InvalidDomainError),
        ("meusite", InvalidDomainError),
        ("https://imobhub.automatech.app.br", BlockedDomainError),
        ("www.automatech.app.br", BlockedDomainError),
    ],
)
def test_validation_errors_never_reach_dns(db, raw, error):
    verifier = _Verifier()
    with pytest.raises(error):
        claim_domain(db, owner_id="u-1", raw_domain=raw, verifier=verifier)
    assert verifier.domains == []
    assert db.query(CustomDomain).count() == 0


def test_claim_held_by_other_owner_conflicts_without_writes(db):
    claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(OK))
    verifier = _Verifier(OK)

    with pytest.raises(DomainTakenError):
        claim_domain(db, owner_id="u-2", raw_domain="WWW.meusite.com.br", verifier=verifier)

    assert verifier.domains == []
    assert crud_custom_domain.get_by_owner(db, "u-2") is None
    assert crud_custom_domain.get_by_owner(db, "u-1").status == DomainStatus.ACTIVE


def test_reclaim_overwrites_owner_record(db):
    claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(OK))
    claim_domain(db, owner_id="u-1", raw_domain="novosite.com", verifier=_Verifier(PENDING))

    assert db.query(CustomDomain).count() == 1
    record = crud_custom_domain.get_by_owner(db, "u-1")
    assert record.domain == "novosite.com"
    assert record.status == DomainStatus.PENDING
    assert record.verified_at is None


def test_released_domain_can_be_claimed_by_someone_else(db):
    claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(OK))
    claim_domain(db, owner_id="u-1", raw_domain="novosite.com", verifier=_Verifier(OK))

    outcome = claim_domain(db, owner_id="u-2", raw_domain="meusite.com.br", verifier=_Verifier(OK))
    assert outcome.ok


def test_upsert_race_is_reported_as_conflict(db):
    """Second writer loses on the unique constraint even if it skipped the pre-check."""
    crud_custom_domain.upsert(
        db, owner_id="u-1", domain="meusite.com.br",
        status=DomainStatus.ACTIVE, verified_at=None, last_checked_at=None,
    )
    with pytest.raises(DomainTakenError):
        crud_custom_domain.upsert(
            db, owner_id="u-2", domain="meusite.com.br",
            status=DomainStatus.PENDING, verified_at=None, last_checked_at=None,
        )
    assert crud_custom_domain.get_by_owner(db, "u-2") is None


def test_reverify_promotes_pending_to_active(db):
    claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(PENDING))

    outcome = reverify_domain(db, owner_id="u-1", verifier=_Verifier(OK))

    assert outcome.ok
    record = crud_custom_domain.get_by_owner(db, "u-1")
    assert record.owner_id == "u-1"
    assert record.status == DomainStatus.ACTIVE
    assert record.verified_at == record.last_checked_at


def test_reverify_failure_keeps_last_success_time(db):
    claim_domain(db, owner_id="u-1", raw_domain="meusite.com.br", verifier=_Verifier(OK))
    verified_at = crud_custom_domain.get_by_owner(db, "u-1").verified_at

    outcome = reverify_domain(db, owner_id="u-1", verifier=_Verifier(PENDING))

    assert not outcome.ok
    record = crud_custom_domain.get_by_owner(db, "u-1")
    assert record.status == DomainStatus.PENDING
    assert record.verified_at == verified_at
    assert record.last_checked_at >= verified_at


def test_reverify_without_claim(db):
    with pytest.raises(NoDomainToVerifyError):
        reverify_domain(db, owner_id="u-9", verifier=_Verifier(OK))


def test_upsert_same_owner_race_updates_existing_row(db, monkeypatch):
    """A concurrent insert for the same owner is not reported as someone else's domain."""
    crud_custom_domain.upsert(
        db, owner_id="u-1", domain="meusite.com.br",
        status=DomainStatus.ACTIVE, verified_at=None, last_checked_at=None,
    )
    real_get_by_owner = crud_custom_domain.get_by_owner
    calls = []

    def _stale_then_real(session, owner_id):
        calls.append(owner_id)
        return None if len(calls) == 1 else real_get_by_owner(session, owner_id)

    monkeypatch.setattr(crud_custom_domain, "get_by_owner", _stale_then_real)

    record = crud_custom_domain.upsert(
        db, owner_id="u-1", domain="novosite.com",
        status=DomainStatus.PENDING, verified_at=None, last_checked_at=None,
    )

    assert len(calls) == 2
    assert record.domain == "novosite.com"
    assert record.status == DomainStatus.PENDING
    rows = db.query(CustomDomain).all()
    assert [(r.owner_id, r.domain) for r in rows] == [("u-1", "novosite.com")]
