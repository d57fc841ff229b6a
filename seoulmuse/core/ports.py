# seoulmuse/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso). Existem duas famílias de
implementação: a relacional (Django ORM) e a local (coleções serializadas sobre um
armazenamento chave-valor).
"""

from typing import Protocol, List, Optional, Dict, Tuple
from abc import abstractmethod

from seoulmuse.core.entities import (
    Produto, Pedido, Cupom, Cliente, Carrinho, ItemCarrinho, RegistroAuditoria,
    Chamado, FiltrosCatalogo, StatusPedido, StatusChamado
)


# ====================================================================
# 0. ARMAZENAMENTO (Porta de baixo nível da variante local)
# ====================================================================

class IArmazenamento(Protocol):
    """Armazenamento chave-valor de snapshots serializados."""

    @abstractmethod
    def get(self, chave: str) -> Optional[str]: ...

    @abstractmethod
    def put(self, chave: str, valor: str) -> None: ...


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IProdutoRepository(Protocol):
    """Protocolo do Catálogo: busca, gravação com SKU único e ajuste de estoque."""

    @abstractmethod
    def buscar_por_id(self, produto_id: str) -> Optional[Produto]: ...

    @abstractmethod
    def listar(self, filtros: FiltrosCatalogo) -> List[Produto]: ...

    @abstractmethod
    def salvar(self, produto: Produto) -> Produto:
        """Insere ou atualiza. Levanta SkuDuplicadoError se outro produto usa o SKU."""
        ...

    @abstractmethod
    def ajustar_estoque(self, produto_id: str, delta: int) -> Optional[Tuple[int, int]]:
        """
        Aplica max(0, estoque + delta). Retorna (anterior, novo) ou None
        quando o produto não existe.
        """
        ...

    @abstractmethod
    def arquivar(self, produto_id: str) -> bool: ...

    @abstractmethod
    def remover(self, produto_id: str) -> bool:
        """Remoção física, também retirando o produto de carrinhos e listas de desejos."""
        ...


class IPedidoRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def criar_pedido(self, pedido: Pedido, baixas_estoque: Dict[str, int]) -> Pedido:
        """
        Baixa o estoque de todos os produtos (somente se estoque >= quantidade) e grava
        o pedido numa única operação atômica. Se qualquer baixa falhar, nada é gravado
        e EstoqueInsuficienteError é levantado.
        """
        ...

    @abstractmethod
    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]: ...

    @abstractmethod
    def listar(self, status: Optional[StatusPedido] = None) -> List[Pedido]: ...

    @abstractmethod
    def atualizar_status(
        self,
        pedido_id: str,
        novo_status: StatusPedido,
        status_esperado: Optional[StatusPedido] = None
    ) -> bool: ...

    @abstractmethod
    def atualizar_rastreio(self, pedido_id: str, codigo_rastreio: str) -> bool: ...


class ICupomRepository(Protocol):

    @abstractmethod
    def buscar_por_codigo(self, codigo: str) -> Optional[Cupom]: ...

    @abstractmethod
    def listar(self) -> List[Cupom]: ...

    @abstractmethod
    def salvar(self, cupom: Cupom) -> Cupom: ...

    @abstractmethod
    def deletar(self, cupom_id: str) -> None: ...

    @abstractmethod
    def registrar_uso(self, cupom_id: str) -> None: ...


class IClienteRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, cliente_id: str) -> Optional[Cliente]: ...

    @abstractmethod
    def buscar_por_email(self, email: str) -> Optional[Cliente]: ...

    @abstractmethod
    def listar(self) -> List[Cliente]: ...

    @abstractmethod
    def salvar(self, cliente: Cliente) -> Cliente: ...

    @abstractmethod
    def registrar_compra(self, email: str, valor) -> bool: ...

    @abstractmethod
    def alternar_desejo(self, cliente_id: str, produto_id: str) -> Optional[List[str]]: ...


class ICarrinhoRepository(Protocol):
    """Protocolo para a persistência de Carrinhos por chave de sessão."""

    @abstractmethod
    def buscar(self, chave: str) -> Carrinho: ...

    @abstractmethod
    def adicionar_item(self, chave: str, item: ItemCarrinho) -> Carrinho: ...

    @abstractmethod
    def remover_item(self, chave: str, id_linha: str) -> Carrinho: ...

    @abstractmethod
    def limpar(self, chave: str) -> None: ...


class IAuditoriaRepository(Protocol):
    """Trilha de auditoria: somente inclusão e leitura."""

    @abstractmethod
    def registrar(self, registro: RegistroAuditoria) -> None: ...

    @abstractmethod
    def listar(self, alvo_id: Optional[str] = None) -> List[RegistroAuditoria]: ...


class IChamadoRepository(Protocol):

    @abstractmethod
    def buscar_por_id(self, chamado_id: str) -> Optional[Chamado]: ...

    @abstractmethod
    def listar(self, status: Optional[StatusChamado] = None) -> List[Chamado]: ...

    @abstractmethod
    def salvar(self, chamado: Chamado) -> Chamado: ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IGeradorTexto(Protocol):
    """Serviço externo de geração de texto, com cache e pausa após falhas."""

    @abstractmethod
    def gerar(self, chave_cache: str, prompt: str, fallback: str = '', instrucao_sistema: Optional[str] = None) -> str: ...
