from typing import Optional

class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    def __init__(self, message="Ocorreu um erro na camada de negócio."):
        self.message = message
        super().__init__(self.message)

class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos."""
    def __init__(self, message="Os dados fornecidos são inválidos."):
        super().__init__(message)

class SkuDuplicadoError(DadosInvalidosError):
    """Erro levantado quando outro produto já usa o mesmo SKU (comparação normalizada)."""
    def __init__(self, sku: str, produto_id: Optional[str] = None, message=None):
        self.sku = sku
        self.produto_id = produto_id
        if message is None:
            message = f"O SKU '{sku.strip()}' já está em uso por outro produto."
            if produto_id:
                message = f"O SKU '{sku.strip()}' já está em uso pelo produto {produto_id}."
        super().__init__(message)

# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    def __init__(self, message="O item solicitado não foi encontrado."):
        super().__init__(message)

class ProdutoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro levantado quando um produto específico não é encontrado."""
    def __init__(self, produto_id: str, message=None):
        self.produto_id = produto_id
        if message is None:
            message = f"O produto {produto_id} não existe mais no catálogo."
        super().__init__(message)

class PedidoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Pedidos não encontrados."""
    pass

class ClienteNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Clientes não encontrados."""
    pass

class ChamadoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Chamados de suporte não encontrados."""
    pass

class PersistenciaError(BaseErroCore):
    """Falha de leitura/escrita no armazenamento. O estado gravado permanece intacto."""
    def __init__(self, message="Falha ao acessar o armazenamento de dados."):
        super().__init__(message)

class EstoqueInsuficienteError(BaseErroCore):
    """Erro levantado quando a quantidade solicitada excede o estoque."""
    def __init__(self, produto_id: str, estoque_atual: int, quantidade_solicitada: int, message=None):
        self.produto_id = produto_id
        self.estoque_atual = estoque_atual
        self.quantidade_solicitada = quantidade_solicitada
        if message is None:
            message = (f"Estoque insuficiente para o produto {produto_id}. "
                       f"Disponível: {estoque_atual}, Solicitado: {quantidade_solicitada}.")
        super().__init__(message)

# ===============================================
# ERROS DE FLUXO DE COMPRA
# ===============================================

class CarrinhoVazioError(BaseErroCore):
    """Erro levantado ao tentar fazer checkout com carrinho vazio."""
    def __init__(self, message="O carrinho de compras está vazio."):
        super().__init__(message)

class StatusInvalidoError(BaseErroCore):
    """Erro levantado ao tentar definir um status de pedido inválido."""
    def __init__(self, message="O status fornecido não é válido para um pedido."):
        super().__init__(message)
