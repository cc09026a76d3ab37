"""Log formatting: masking and request context fields."""
import json
import logging

import pytest

from app.logging_config import (
    HumanFormatter,
    JSONFormatter,
    custom_domain_ctx,
    mask_pii,
    request_id_ctx,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('{"senha": "segredo123"}', '{"senha": "***"}'),
        ('password="abc"', 'password="***"'),
        ("Authorization: Bearer eyJhbGciOi.abc-def", "Authorization: Bearer ***"),
        ("contato joao.silva@imobiliaria.com.br", "contato j***a@imobiliaria.com.br"),
        ("jo@x.com", "j***@x.com"),
    ],
)
def test_mask_pii(raw, expected):
    assert mask_pii(raw) == expected


def _record(msg, *args):
    return logging.LogRecord("imobhub.dns", logging.INFO, __file__, 1, msg, args, None)


def test_json_lines_carry_request_and_domain_context():
    rid = request_id_ctx.set("ab12cd34")
    dom = custom_domain_ctx.set("meusite.com.br")
    try:
        line = JSONFormatter().format(_record("checked %s for %s", "meusite.com.br", "ana@corretora.com"))
    finally:
        request_id_ctx.reset(rid)
        custom_domain_ctx.reset(dom)

    entry = json.loads(line)
    assert entry["request_id"] == "ab12cd34"
    assert entry["custom_domain"] == "meusite.com.br"
    assert "broker_id" not in entry
    assert entry["message"] == "checked meusite.com.br for a***a@corretora.com"


def test_human_line_masks_and_shows_domain():
    dom = custom_domain_ctx.set("meusite.com.br")
    try:
        line = HumanFormatter(HumanFormatter.FORMAT).format(_record("token=%s", '"t0k"'))
    finally:
        custom_domain_ctx.reset(dom)

    assert "[meusite.com.br]" in line
    assert line.endswith('token="***"')
