# services/supplier_contact.py

import re
from typing import Any, Dict
from urllib.parse import quote

from core.utils import format_date_br


def build_contact_message(request: Dict[str, Any], supplier: Dict[str, Any]) -> str:
    """pt-BR maintenance request sent to the assigned supplier."""
    condominium = (request.get("condominium") or {}).get("name") or "Condomínio"
    service_types = ", ".join(request.get("service_types") or [])

    lines = [
        f"Olá {supplier.get('name', '')},",
        "",
        "Temos uma nova solicitação de manutenção:",
        "",
        f"📋 *Título:* {request.get('title', '')}",
        f"🏢 *Condomínio:* {condominium}",
        f"📝 *Descrição:* {request.get('description', '')}",
        f"🔧 *Tipos de Serviço:* {service_types}",
        f"📅 *Data de Abertura:* {format_date_br(request.get('opening_date'))}",
    ]
    if request.get("notes"):
        lines += ["", f"📌 *Observações:* {request['notes']}"]
    lines += [
        "",
        "Por favor, entre em contato para mais detalhes.",
        "",
        "Atenciosamente,",
        "Administração do Condomínio",
    ]
    return "\n".join(lines)


def contact_subject(request: Dict[str, Any]) -> str:
    return f"Nova Solicitação de Manutenção - {request.get('title', '')}"


def mailto_link(email: str, subject: str, body: str) -> str:
    return f"mailto:{email}?subject={quote(subject, safe='')}&body={quote(body, safe='')}"


def whatsapp_digits(number: str) -> str:
    return re.sub(r"\D", "", number or "")


def whatsapp_link(number: str, message: str) -> str:
    return f"https://wa.me/{whatsapp_digits(number)}?text={quote(message, safe='')}"
