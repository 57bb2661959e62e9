# core/plans.py

"""
Stripe products sold by the app.

Price ids are Stripe dashboard values; the signup form posts one of them and
the subscription screen maps the stored price id back to a display name.
"""

from typing import List, Optional

from pydantic import BaseModel

UNKNOWN_PLAN_NAME = "Plano Desconhecido"


class Plan(BaseModel):
    id: str
    price_id: str
    name: str
    description: str
    price: str
    mode: str  # "subscription" | "payment"
    features: List[str]
    popular: bool = False


PLANS: List[Plan] = [
    Plan(
        id="prod_T5hOumUN5jL1An",
        price_id="price_1S9VzNQYgD0y1NyBUCtR05dg",
        name="Assinatura Mensal",
        description="Plano completo para gestão de condomínios",
        price="R$ 89,90",
        mode="subscription",
        features=[
            "Condomínios ilimitados",
            "Gestão completa de fornecedores",
            "Controle avançado de manutenções",
            "Relatórios detalhados",
            "Upload de fotos",
            "Comunicação WhatsApp/Email",
            "Suporte prioritário",
        ],
        popular=True,
    ),
]


def get_plan_by_id(product_id: str) -> Optional[Plan]:
    return next((p for p in PLANS if p.id == product_id), None)


def get_plan_by_price_id(price_id: Optional[str]) -> Optional[Plan]:
    if not price_id:
        return None
    return next((p for p in PLANS if p.price_id == price_id), None)


def plan_display_name(price_id: Optional[str]) -> Optional[str]:
    """None without a price id; UNKNOWN_PLAN_NAME for ids we don't sell."""
    if not price_id:
        return None
    plan = get_plan_by_price_id(price_id)
    return plan.name if plan else UNKNOWN_PLAN_NAME
