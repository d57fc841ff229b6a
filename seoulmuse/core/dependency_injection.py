# seoulmuse/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.

A variante de persistência vem do setting ARMAZENAMENTO_BACKEND:
'orm' (padrão, banco relacional) ou 'cache' (coleções serializadas no cache do Django).
"""
import threading
from contextlib import nullcontext
from decimal import Decimal
from typing import Dict, Optional

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.db import transaction

from seoulmuse.infrastructure.armazenamento import (
    ArmazenamentoCache,
    AuditoriaRepositoryLocal,
    CarrinhoRepositoryLocal,
    ChamadoRepositoryLocal,
    ClienteRepositoryLocal,
    ColecoesLocais,
    CupomRepositoryLocal,
    PedidoRepositoryLocal,
    ProdutoRepositoryLocal,
)
from seoulmuse.infrastructure.gateways import ServicoTextoIA
from seoulmuse.infrastructure.repositories import (
    AuditoriaRepositoryDjango,
    CarrinhoRepositoryDjango,
    ChamadoRepositoryDjango,
    ClienteRepositoryDjango,
    CupomRepositoryDjango,
    PedidoRepositoryDjango,
    ProdutoRepositoryDjango,
)
from .use_cases import (
    ConsultarAuditoriaUseCase,
    CriarPedidoUseCase,
    EstatisticasPainelUseCase,
    FinalizarCheckoutUseCase,
    GerarConteudoIAUseCase,
    GerenciarCarrinhoUseCase,
    GerenciarCatalogoUseCase,
    GerenciarChamadosUseCase,
    GerenciarClientesUseCase,
    GerenciarCuponsUseCase,
    GerenciarPedidosAdminUseCase,
)

_colecoes_locais: Optional[ColecoesLocais] = None
_colecoes_lock = threading.Lock()


def get_colecoes_locais() -> ColecoesLocais:
    """Instância única: o lock de escrita precisa ser o mesmo para todos os repositórios."""
    global _colecoes_locais
    with _colecoes_lock:
        if _colecoes_locais is None:
            _colecoes_locais = ColecoesLocais(
                ArmazenamentoCache(),
                limite_auditoria=settings.LIMITE_AUDITORIA_LOCAL,
            )
        return _colecoes_locais


def get_repositorios() -> Dict[str, object]:
    if settings.ARMAZENAMENTO_BACKEND == 'cache':
        colecoes = get_colecoes_locais()
        return {
            'produto': ProdutoRepositoryLocal(colecoes),
            'pedido': PedidoRepositoryLocal(colecoes),
            'cupom': CupomRepositoryLocal(colecoes),
            'cliente': ClienteRepositoryLocal(colecoes),
            'carrinho': CarrinhoRepositoryLocal(colecoes),
            'auditoria': AuditoriaRepositoryLocal(colecoes),
            'chamado': ChamadoRepositoryLocal(colecoes),
        }
    return {
        'produto': ProdutoRepositoryDjango(),
        'pedido': PedidoRepositoryDjango(),
        'cupom': CupomRepositoryDjango(),
        'cliente': ClienteRepositoryDjango(),
        'carrinho': CarrinhoRepositoryDjango(),
        'auditoria': AuditoriaRepositoryDjango(),
        'chamado': ChamadoRepositoryDjango(),
    }


# ====================================================================
# Use Cases de Catálogo/Administração
# ====================================================================

def get_catalogo_use_case() -> GerenciarCatalogoUseCase:
    repos = get_repositorios()
    return GerenciarCatalogoUseCase(repos['produto'], repos['auditoria'])

def get_pedidos_admin_use_case() -> GerenciarPedidosAdminUseCase:
    repos = get_repositorios()
    return GerenciarPedidosAdminUseCase(
        repos['pedido'], repos['auditoria'], transicoes_estritas=settings.TRANSICOES_ESTRITAS
    )

def get_cupons_use_case() -> GerenciarCuponsUseCase:
    repos = get_repositorios()
    return GerenciarCuponsUseCase(repos['cupom'], repos['auditoria'])

def get_auditoria_use_case() -> ConsultarAuditoriaUseCase:
    return ConsultarAuditoriaUseCase(get_repositorios()['auditoria'])

def get_estatisticas_use_case() -> EstatisticasPainelUseCase:
    repos = get_repositorios()
    return EstatisticasPainelUseCase(repos['pedido'], repos['produto'])

def get_conteudo_ia_use_case() -> GerarConteudoIAUseCase:
    return GerarConteudoIAUseCase(ServicoTextoIA())


# ====================================================================
# Use Cases de Vendas/Carrinho
# ====================================================================

def get_carrinho_use_case() -> GerenciarCarrinhoUseCase:
    repos = get_repositorios()
    return GerenciarCarrinhoUseCase(repos['carrinho'], repos['produto'])

def get_checkout_use_case() -> FinalizarCheckoutUseCase:
    repos = get_repositorios()
    criar_pedido = CriarPedidoUseCase(repos['produto'], repos['pedido'], repos['auditoria'])
    return FinalizarCheckoutUseCase(
        carrinho_repo=repos['carrinho'],
        cupom_repo=repos['cupom'],
        cliente_repo=repos['cliente'],
        criar_pedido=criar_pedido,
        taxa_imposto=Decimal(str(settings.TAXA_IMPOSTO)),
        metodos_envio={nome: Decimal(str(valor)) for nome, valor in settings.METODOS_ENVIO.items()},
        unidade_de_trabalho=nullcontext if settings.ARMAZENAMENTO_BACKEND == 'cache' else transaction.atomic,
    )


# ====================================================================
# Use Cases de Clientes/Suporte
# ====================================================================

def get_clientes_use_case() -> GerenciarClientesUseCase:
    repos = get_repositorios()
    return GerenciarClientesUseCase(
        repos['cliente'], repos['produto'], gerar_hash=make_password, verificar_hash=check_password
    )

def get_chamados_use_case() -> GerenciarChamadosUseCase:
    return GerenciarChamadosUseCase(get_repositorios()['chamado'])
