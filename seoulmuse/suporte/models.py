from django.db import models
from django.utils import timezone

from seoulmuse.core.entities import PrioridadeChamado, StatusChamado


class RegistroAuditoria(models.Model):
    """Trilha de auditoria. Somente inclusão: nenhuma view altera ou remove registros."""
    id = models.CharField(primary_key=True, max_length=64)
    acao = models.CharField(max_length=30, db_index=True)
    alvo_id = models.CharField(max_length=64, db_index=True)
    mensagem = models.TextField()
    autor = models.CharField(max_length=254)
    data = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Registro de Auditoria"
        verbose_name_plural = "Registros de Auditoria"
        db_table = 'suporte_auditoria'
        ordering = ['-data']

    def __str__(self):
        return f"[{self.acao}] {self.alvo_id}"


class Chamado(models.Model):
    """Chamado da central de suporte. Respostas e notas ficam serializadas em JSON."""
    STATUS_CHOICES = [(s.value, s.value) for s in StatusChamado]
    PRIORIDADE_CHOICES = [(p.value, p.value) for p in PrioridadeChamado]

    id = models.CharField(primary_key=True, max_length=20)  # TKT-XXXXXXXX
    cliente_id = models.CharField(max_length=64)
    nome_cliente = models.CharField(max_length=255)
    assunto = models.CharField(max_length=255)
    mensagem = models.TextField()
    pedido_id = models.CharField(max_length=20, blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=StatusChamado.ABERTO.value)
    prioridade = models.CharField(max_length=20, choices=PRIORIDADE_CHOICES, default=PrioridadeChamado.MEDIA.value)
    notas = models.JSONField(default=list, blank=True)
    respostas = models.JSONField(default=list, blank=True)
    data_criacao = models.DateTimeField(default=timezone.now)
    data_atualizacao = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Chamado"
        verbose_name_plural = "Chamados"
        db_table = 'suporte_chamado'
        ordering = ['-data_atualizacao']

    def __str__(self):
        return f"{self.id} - {self.assunto}"
