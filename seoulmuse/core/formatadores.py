"""
Serialização em texto: exportação delimitada do catálogo e fatura do pedido.
"""
import csv
import io
from datetime import date
from typing import Iterable, Optional

from seoulmuse.core.entities import Pedido, Produto

CABECALHO_CSV = ['SKU', 'Name', 'Category', 'Collection', 'Stock', 'Price', 'Status']


def exportar_csv(produtos: Iterable[Produto], delimitador: str = ',') -> str:
    """
    Gera a tabela delimitada na ordem recebida. Campos com o delimitador, aspas ou
    quebra de linha são envolvidos em aspas e as aspas internas são duplicadas.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimitador, quotechar='"',
                        quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(CABECALHO_CSV)
    for produto in produtos:
        writer.writerow([
            produto.sku,
            produto.nome,
            produto.categoria,
            produto.colecao or '',
            produto.estoque,
            f"{produto.preco:.2f}",
            produto.status.value,
        ])
    return buffer.getvalue()


def nome_arquivo_exportacao(dia: Optional[date] = None) -> str:
    dia = dia or date.today()
    return f"inventario-{dia.isoformat()}.csv"


def gerar_fatura_texto(pedido: Pedido) -> str:
    """Fatura em texto puro, no formato enviado ao cliente."""
    linhas = [
        f"SEOUL MUSE ATELIER - INVOICE {pedido.id}",
        f"Date: {pedido.data_pedido.date().isoformat()}",
        f"Customer: {pedido.nome_cliente}",
        f"Status: {pedido.status.value}",
        "",
    ]
    for item in pedido.itens:
        linhas.append(f"{item.nome} x {item.quantidade} @ ${item.preco_unitario:.2f}")
    linhas += [
        "",
        f"Subtotal: ${pedido.subtotal:.2f}",
        f"Discount: ${pedido.desconto:.2f}",
        f"Tax: ${pedido.imposto:.2f}",
        f"Shipping: ${pedido.frete:.2f}",
        f"Total: ${pedido.total:.2f}",
    ]
    if pedido.codigo_rastreio:
        linhas.append(f"Tracking: {pedido.codigo_rastreio}")
    return "\n".join(linhas)
