# seoulmuse/core/catalogo.py
"""
Regras de filtragem e ordenação do catálogo.

As duas variantes de armazenamento precisam devolver exatamente a mesma listagem:
a variante local aplica estas funções em memória, a relacional traduz os mesmos
critérios para o ORM (ver infrastructure/repositories.py).
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from seoulmuse.core.entities import FiltrosCatalogo, Produto, StatusProduto
from seoulmuse.core.exceptions import DadosInvalidosError

LIMITE_ESTOQUE_BAIXO = 10  # 'Low' = 1..9 unidades

_DATA_MINIMA = datetime.min.replace(tzinfo=timezone.utc)

# Campo exposto na API -> (atributo da entidade, valor usado quando ausente)
CAMPOS_ORDENACAO: Dict[str, Tuple[str, object]] = {
    'price': ('preco', Decimal('0')),
    'stock': ('estoque', 0),
    'name': ('nome', ''),
    'createdAt': ('data_criacao', _DATA_MINIMA),
    'rating': ('avaliacao', Decimal('0')),
}

STATUS_FILTRAVEIS = {s.value for s in StatusProduto} | {'All'}
NIVEIS_ESTOQUE = {'All', 'Low', 'Out'}


def validar_filtros(filtros: FiltrosCatalogo) -> FiltrosCatalogo:
    """Rejeita critérios desconhecidos antes de qualquer consulta."""
    if filtros.ordenar_por not in CAMPOS_ORDENACAO:
        raise DadosInvalidosError(f"Campo de ordenação inválido: '{filtros.ordenar_por}'.")
    if filtros.ordem not in ('asc', 'desc'):
        raise DadosInvalidosError(f"Ordem inválida: '{filtros.ordem}'. Use 'asc' ou 'desc'.")
    if filtros.status and filtros.status not in STATUS_FILTRAVEIS:
        raise DadosInvalidosError(f"Status de produto inválido: '{filtros.status}'.")
    if filtros.nivel_estoque not in NIVEIS_ESTOQUE:
        raise DadosInvalidosError(f"Nível de estoque inválido: '{filtros.nivel_estoque}'.")
    return filtros


def _atende_status(produto: Produto, status: Optional[str]) -> bool:
    if not status:
        return produto.status != StatusProduto.ARQUIVADO
    if status == 'All':
        return True
    return produto.status.value == status


def _atende_estoque(produto: Produto, nivel: str) -> bool:
    if nivel == 'Low':
        return 1 <= produto.estoque < LIMITE_ESTOQUE_BAIXO
    if nivel == 'Out':
        return produto.estoque == 0
    return True


def _atende_busca(produto: Produto, busca: str) -> bool:
    termo = busca.strip().lower()
    if not termo:
        return True
    campos = (produto.nome, produto.sku, produto.colecao or '')
    return any(termo in campo.lower() for campo in campos)


def filtrar_produtos(produtos: Iterable[Produto], filtros: FiltrosCatalogo) -> List[Produto]:
    resultado = []
    for produto in produtos:
        if not _atende_status(produto, filtros.status):
            continue
        if filtros.categoria and filtros.categoria != 'All' and produto.categoria != filtros.categoria:
            continue
        if not _atende_estoque(produto, filtros.nivel_estoque):
            continue
        if not _atende_busca(produto, filtros.busca):
            continue
        if filtros.preco_min is not None and produto.preco < filtros.preco_min:
            continue
        if filtros.preco_max is not None and produto.preco > filtros.preco_max:
            continue
        resultado.append(produto)
    return resultado


def _chave_ordenacao(campo: str) -> Callable[[Produto], object]:
    atributo, padrao = CAMPOS_ORDENACAO[campo]

    def chave(produto: Produto):
        valor = getattr(produto, atributo)
        return padrao if valor is None else valor

    return chave


def ordenar_produtos(produtos: Iterable[Produto], ordenar_por: str, ordem: str) -> List[Produto]:
    """
    Ordena pelo campo pedido. Empates são sempre desfeitos pelo id em ordem crescente,
    inclusive na ordem decrescente (o sort do Python é estável com reverse=True).
    """
    por_id = sorted(produtos, key=lambda p: p.id or '')
    return sorted(por_id, key=_chave_ordenacao(ordenar_por), reverse=(ordem == 'desc'))


def consultar_catalogo(produtos: Iterable[Produto], filtros: FiltrosCatalogo) -> List[Produto]:
    validar_filtros(filtros)
    return ordenar_produtos(filtrar_produtos(produtos, filtros), filtros.ordenar_por, filtros.ordem)
