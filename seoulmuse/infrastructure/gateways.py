import logging
import threading
from typing import Optional

import requests
from django.conf import settings
from django.core.cache import caches

from seoulmuse.core.ports import IGeradorTexto

logger = logging.getLogger(__name__)


# ====================================================================
# GATEWAYS: Implementações concretas que se comunicam com APIs externas.
# ====================================================================

class ServicoTextoIA(IGeradorTexto):
    """
    Gateway para a API generateContent do Gemini.

    - Respostas bem-sucedidas ficam no cache do Django (24h por padrão).
    - Erro do provedor ou HTTP 429 abre uma pausa (5 min por padrão) em que toda
      chamada devolve o texto de fallback sem acessar a rede.
    - Uma única chamada em andamento por processo.
    """

    URL_API = "https://generativelanguage.googleapis.com/v1beta/models/{modelo}:generateContent"
    CHAVE_PAUSA = 'seoul_muse:ia:pausa'

    # Compartilhado entre instâncias: serializa as chamadas ao provedor
    _lock = threading.Lock()

    def __init__(
        self,
        api_key: Optional[str] = None,
        modelo: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_segundos: Optional[int] = None,
        pausa_segundos: Optional[int] = None,
        cache_alias: str = 'default',
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.modelo = modelo or settings.GEMINI_MODELO
        self.timeout = timeout or settings.GEMINI_TIMEOUT
        self.cache_segundos = cache_segundos or settings.IA_CACHE_SEGUNDOS
        self.pausa_segundos = pausa_segundos or settings.IA_COOLDOWN_SEGUNDOS
        self.cache_alias = cache_alias

        if not self.api_key:
            logger.warning("GEMINI_API_KEY não configurada. Os textos gerados usarão o fallback.")

    @property
    def cache(self):
        return caches[self.cache_alias]

    def em_pausa(self) -> bool:
        return self.cache.get(self.CHAVE_PAUSA) is not None

    def _abrir_pausa(self):
        self.cache.set(self.CHAVE_PAUSA, True, self.pausa_segundos)

    def gerar(self, chave_cache: str, prompt: str, fallback: str = '', instrucao_sistema: Optional[str] = None) -> str:
        em_cache = self.cache.get(chave_cache)
        if em_cache is not None:
            return em_cache
        if not self.api_key:
            return fallback

        with self._lock:
            # Outra thread pode ter preenchido o cache enquanto esperávamos
            em_cache = self.cache.get(chave_cache)
            if em_cache is not None:
                return em_cache
            if self.em_pausa():
                return fallback

            texto = self._chamar_api(prompt, instrucao_sistema)
            if not texto:
                return fallback

            self.cache.set(chave_cache, texto, self.cache_segundos)
            return texto

    def _chamar_api(self, prompt: str, instrucao_sistema: Optional[str]) -> Optional[str]:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        if instrucao_sistema:
            payload["systemInstruction"] = {"parts": [{"text": instrucao_sistema}]}

        try:
            url = self.URL_API.format(modelo=self.modelo)
            response = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)

            if response.status_code == 429:
                logger.warning("Cota do provedor de IA excedida. Pausa de %ss.", self.pausa_segundos)
                self._abrir_pausa()
                return None

            response.raise_for_status()
            data = response.json()
            return data["candidates"][0]["content"]["parts"][0]["text"].strip()

        except requests.exceptions.RequestException as e:
            logger.error("Erro de conexão com o provedor de IA: %s", e)
        except (ValueError, KeyError, IndexError) as e:
            logger.error("Resposta inesperada do provedor de IA: %s", e)

        self._abrir_pausa()
        return None
