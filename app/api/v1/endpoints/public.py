"""
Public storefront API

Unauthenticated routes reached directly on the platform domain or through
the custom domain rewrite (the middleware sets request.state.custom_domain).
"""
from html import escape
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from app.api import deps
from app.config import settings
from app.crud import crud_custom_domain
from app.schemas.custom_domain import StorefrontPublic

router = APIRouter()

_NOT_FOUND_HTML = """<!DOCTYPE html>
<html lang="pt-BR">
<head><meta charset="utf-8"><title>Domínio não encontrado</title></head>
<body>
  <h1>Domínio não encontrado</h1>
  <p>O endereço <strong>{domain}</strong> não está vinculado a nenhum corretor ativo.</p>
  <p><a href="https://{default_domain}">Ir para {default_domain}</a></p>
</body>
</html>
"""


# Any method on an unknown domain lands here after the rewrite
@router.api_route(
    settings.DOMAIN_NOT_FOUND_PATH,
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_class=HTMLResponse,
    include_in_schema=False,
)
def domain_not_found(request: Request) -> HTMLResponse:
    domain = getattr(request.state, "custom_domain", None) or request.headers.get("host", "")
    html = _NOT_FOUND_HTML.format(
        domain=escape(domain),
        default_domain=escape(settings.DEFAULT_DOMAIN),
    )
    return HTMLResponse(html, status_code=404)


def _storefront(request: Request, db: Session, slug: str, path: str) -> StorefrontPublic:
    broker = crud_custom_domain.get_broker_by_slug(db, slug)
    if not broker:
        raise HTTPException(status_code=404, detail="Corretor não encontrado")
    return StorefrontPublic(
        slug=broker.slug,
        name=broker.name,
        path=path,
        customDomain=getattr(request.state, "custom_domain", None),
    )


@router.get(settings.STOREFRONT_BASE_PATH + "/{slug}", response_model=StorefrontPublic)
def storefront_home(slug: str, request: Request, db: Session = Depends(deps.get_db)) -> Any:
    return _storefront(request, db, slug, "/")


@router.get(settings.STOREFRONT_BASE_PATH + "/{slug}/{rest:path}", response_model=StorefrontPublic)
def storefront_page(slug: str, rest: str, request: Request, db: Session = Depends(deps.get_db)) -> Any:
    return _storefront(request, db, slug, f"/{rest}")
