# seoulmuse/core/precificacao.py
"""
Calculadora de Preços do checkout (função pura, sem efeitos colaterais).

    subtotal = soma(preco_unitario * quantidade)
    desconto = subtotal * valor / 100 (Percentage) | valor (Fixed), limitado ao subtotal
    imposto  = (subtotal - desconto) * taxa_imposto
    total    = subtotal - desconto + imposto + frete
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from seoulmuse.core.entities import Cupom, ItemCarrinho, ResumoPrecos, TipoDesconto
from seoulmuse.core.exceptions import DadosInvalidosError

CENTAVOS = Decimal('0.01')


def arredondar(valor) -> Decimal:
    return Decimal(valor).quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def calcular_desconto(subtotal: Decimal, cupom: Optional[Cupom]) -> Decimal:
    if cupom is None:
        return Decimal('0.00')
    if cupom.tipo_desconto == TipoDesconto.PERCENTUAL:
        desconto = subtotal * Decimal(cupom.valor) / Decimal('100')
    else:
        desconto = Decimal(cupom.valor)
    # Um cupom nunca torna o valor dos produtos negativo.
    return arredondar(min(max(desconto, Decimal('0')), subtotal))


def calcular_precos(
    itens: Iterable[ItemCarrinho],
    cupom: Optional[Cupom],
    frete,
    taxa_imposto,
) -> ResumoPrecos:
    frete = arredondar(frete)
    taxa_imposto = Decimal(taxa_imposto)
    if frete < 0:
        raise DadosInvalidosError("O valor do frete não pode ser negativo.")
    if taxa_imposto < 0:
        raise DadosInvalidosError("A taxa de imposto não pode ser negativa.")

    subtotal = arredondar(sum((item.preco_unitario * item.quantidade for item in itens), Decimal('0')))
    desconto = calcular_desconto(subtotal, cupom)
    imposto = arredondar((subtotal - desconto) * taxa_imposto)
    total = subtotal - desconto + imposto + frete

    return ResumoPrecos(
        subtotal=subtotal,
        desconto=desconto,
        imposto=imposto,
        frete=frete,
        total=arredondar(total),
    )
