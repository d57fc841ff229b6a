from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any, Union
import uuid

# ====================================================================
# ENUMERAÇÕES DE DOMÍNIO
# Os valores são os mesmos gravados no armazenamento e expostos na API.
# ====================================================================

class StatusProduto(str, Enum):
    ATIVO = 'Active'
    RASCUNHO = 'Draft'
    ARQUIVADO = 'Archived'


class StatusPedido(str, Enum):
    PENDENTE = 'Pending'
    PAGO = 'Paid'
    ENVIADO = 'Shipped'
    ENTREGUE = 'Delivered'
    DEVOLUCAO_SOLICITADA = 'ReturnRequested'
    CANCELADO = 'Cancelled'
    REEMBOLSADO = 'Refunded'


class TipoDesconto(str, Enum):
    PERCENTUAL = 'Percentage'
    FIXO = 'Fixed'


class StatusCupom(str, Enum):
    ATIVO = 'Active'
    EXPIRADO = 'Expired'


class StatusCliente(str, Enum):
    ATIVO = 'Active'
    BLOQUEADO = 'Blocked'


class StatusChamado(str, Enum):
    ABERTO = 'Open'
    EM_ANDAMENTO = 'In Progress'
    RESOLVIDO = 'Resolved'
    FECHADO = 'Closed'


class PrioridadeChamado(str, Enum):
    BAIXA = 'Low'
    MEDIA = 'Medium'
    ALTA = 'High'
    CRITICA = 'Critical'


class PoliticaExclusao(str, Enum):
    """Remoção física (libera o SKU) ou arquivamento (mantém o SKU ocupado)."""
    REMOVER = 'hard'
    ARQUIVAR = 'soft'


def gerar_id(prefixo: str = '') -> str:
    """Gera um identificador opaco, opcionalmente com prefixo legível."""
    return f"{prefixo}{uuid.uuid4().hex}"


def agora() -> datetime:
    return datetime.now(timezone.utc)


def normalizar_sku(sku: Optional[str]) -> str:
    """Forma canônica usada na comparação de unicidade do SKU."""
    return (sku or '').strip().lower()


# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros.
# ====================================================================

@dataclass
class Produto:
    """Entidade do Produto vendido no catálogo."""
    sku: str
    nome: str
    preco: Decimal
    estoque: int
    categoria: str
    status: StatusProduto = StatusProduto.RASCUNHO
    colecao: Optional[str] = None
    imagem: str = ''
    calor_social: Optional[int] = None
    avaliacao: Optional[Decimal] = None
    id: Optional[str] = None
    data_criacao: Optional[datetime] = None
    data_atualizacao: Optional[datetime] = None

    @property
    def sku_normalizado(self) -> str:
        return normalizar_sku(self.sku)

    @property
    def disponivel(self) -> bool:
        return self.status == StatusProduto.ATIVO and self.estoque > 0


@dataclass
class ItemCarrinho:
    """Linha do carrinho: snapshot do produto no momento em que foi adicionado."""
    produto_id: str
    nome: str
    preco_unitario: Decimal
    quantidade: int = 1
    id_linha: str = field(default_factory=lambda: gerar_id('linha-'))

    @property
    def subtotal(self) -> Decimal:
        return self.preco_unitario * self.quantidade


@dataclass
class Carrinho:
    """Entidade do Carrinho de Compras, identificado pela chave da sessão do cliente."""
    chave: str
    itens: List[ItemCarrinho] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.itens), Decimal('0.00'))

    def quantidades_por_produto(self) -> Dict[str, int]:
        """Soma as quantidades de linhas repetidas do mesmo produto."""
        quantidades: Dict[str, int] = {}
        for item in self.itens:
            quantidades[item.produto_id] = quantidades.get(item.produto_id, 0) + item.quantidade
        return quantidades


@dataclass
class ItemPedido:
    """Snapshot de um item no momento da compra (imutável)."""
    produto_id: str
    nome: str
    quantidade: int
    preco_unitario: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.preco_unitario * self.quantidade


@dataclass
class ResumoPrecos:
    """Resultado da Calculadora de Preços; gravado no pedido sem recálculo."""
    subtotal: Decimal
    desconto: Decimal
    imposto: Decimal
    frete: Decimal
    total: Decimal


@dataclass
class DadosCliente:
    """Dados de contato e entrega informados no checkout."""
    nome: str
    email: str
    forma_pagamento: str = 'Credit Card'
    endereco_entrega: Union[Dict[str, Any], str] = 'N/A'


@dataclass
class Pedido:
    """Entidade do Pedido de Venda."""
    nome_cliente: str
    email_cliente: str
    itens: List[ItemPedido]
    subtotal: Decimal
    imposto: Decimal
    desconto: Decimal
    frete: Decimal
    total: Decimal
    status: StatusPedido = StatusPedido.PENDENTE
    forma_pagamento: str = 'Credit Card'
    endereco_entrega: Union[Dict[str, Any], str] = 'N/A'
    codigo_rastreio: Optional[str] = None
    codigo_cupom: Optional[str] = None
    id: Optional[str] = None
    data_pedido: datetime = field(default_factory=agora)


@dataclass
class Cupom:
    """Regra de desconto aplicada no checkout."""
    codigo: str
    tipo_desconto: TipoDesconto
    valor: Decimal
    data_expiracao: Optional[str] = None
    quantidade_usos: int = 0
    status: StatusCupom = StatusCupom.ATIVO
    id: Optional[str] = None


@dataclass
class Endereco:
    """Endereço de entrega salvo no perfil do cliente."""
    nome_completo: str
    rua: str
    cidade: str
    estado: str = ''
    cep: str = ''
    pais: str = 'South Korea'


@dataclass
class Cliente:
    """Entidade do Cliente. O e-mail é a chave natural usada pelos pedidos."""
    nome: str
    email: str
    senha_hash: str = ''
    total_pedidos: int = 0
    total_gasto: Decimal = Decimal('0.00')
    status: StatusCliente = StatusCliente.ATIVO
    lista_desejos: List[str] = field(default_factory=list)
    enderecos: List[Endereco] = field(default_factory=list)
    data_cadastro: Optional[str] = None
    id: Optional[str] = None


@dataclass
class RegistroAuditoria:
    """Entrada da trilha de auditoria (somente inclusão)."""
    acao: str
    alvo_id: str
    mensagem: str
    autor: str
    data: datetime = field(default_factory=agora)
    id: str = field(default_factory=lambda: gerar_id('log-'))


@dataclass
class RespostaChamado:
    autor: str
    mensagem: str
    admin: bool = False
    data: datetime = field(default_factory=agora)
    id: str = field(default_factory=lambda: gerar_id('resp-'))


@dataclass
class Chamado:
    """Chamado da central de suporte."""
    cliente_id: str
    nome_cliente: str
    assunto: str
    mensagem: str
    pedido_id: Optional[str] = None
    status: StatusChamado = StatusChamado.ABERTO
    prioridade: PrioridadeChamado = PrioridadeChamado.MEDIA
    notas_internas: List[str] = field(default_factory=list)
    respostas: List[RespostaChamado] = field(default_factory=list)
    id: Optional[str] = None
    data_criacao: datetime = field(default_factory=agora)
    data_atualizacao: datetime = field(default_factory=agora)


@dataclass
class FiltrosCatalogo:
    """Critérios de listagem do catálogo."""
    busca: str = ''
    categoria: str = 'All'
    status: Optional[str] = None  # None: tudo que não estiver arquivado
    nivel_estoque: str = 'All'    # 'All' | 'Low' | 'Out'
    ordenar_por: str = 'createdAt'
    ordem: str = 'desc'
    preco_min: Optional[Decimal] = None
    preco_max: Optional[Decimal] = None
