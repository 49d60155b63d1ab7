"""Document-understanding calls via LiteLLM.

Two operations:
- extract_metadata: summary sheet -> name, budget, scoring, links
- analyze: tender info + documents + business rules -> feasibility report

Files are sent inline as base64 data URLs. The API key is checked lazily on
the first real call, so flows that never reach the service (scan, probe,
board) work without one. Failures here propagate: the caller decides how to
surface them.
"""
import base64
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .schemas import AnalysisRequest, AnalysisResult, TenderMetadata
from .settings import LLMSettings
from ..documents import DocumentFile
from ..errors import ServiceCallError, ServiceResponseError

logger = logging.getLogger(__name__)

METADATA_PROMPT = """Analiza este documento de licitación (Hoja Resumen). Extrae los siguientes datos con precisión:

1. NAME: Título completo del expediente.
2. BUDGET: Presupuesto base de licitación o valor estimado (SIN IMPUESTOS si es posible distinguir). Incluye el símbolo de moneda. Ej: "150.000 €".
3. SCORING SYSTEM: Resume brevemente los criterios de adjudicación. Ej: "Precio 60%, Técnico 40%" o "Juicio de valor 30 ptos, Automático 70 ptos".
4. TENDER PAGE URL: Enlace a la plataforma de contratación (contrataciondelestado, placsp, etc).
5. ADMIN URL: Enlace directo al Pliego Administrativo (PCAP).
6. TECH URL: Enlace directo al Pliego Técnico (PPT).

Responde estrictamente en JSON, sin bloques de código markdown:
{"name": "", "budget": "", "scoringSystem": "", "tenderPageUrl": "", "adminUrl": "", "techUrl": ""}
Usa "" para cualquier dato que no aparezca en el documento."""

ANALYSIS_RESPONSE_SHAPE = """{
  "decision": "KEEP | DISCARD | REVIEW",
  "summaryReasoning": "Breve justificación de 1 frase",
  "economic": {"budget": "", "model": "", "basis": ""},
  "scope": {"objective": "", "deliverables": [""]},
  "resources": {"duration": "", "team": "", "dedication": ""},
  "solvency": {"certifications": "", "specificSolvency": "", "penalties": ""},
  "strategy": {"angle": ""},
  "scoring": {
    "priceWeight": 0, "formulaWeight": 0, "valueWeight": 0,
    "details": "",
    "subCriteria": [{"label": "", "weight": 0, "category": "PRICE | FORMULA | VALUE"}]
  }
}"""


def build_analysis_system_prompt(rules: str) -> str:
    """System prompt for the feasibility report. Shown to users as-is."""
    return f"""Actúa como un Analista Senior de Licitaciones Públicas (Bid Manager) en España. Voy a facilitarte información de los pliegos (PCAP y PPT) de una licitación.

Tu objetivo es generar un "Informe Ejecutivo de Viabilidad" para decidir el Go/No-Go. Debes analizar el texto proporcionado y extraer EXCLUSIVAMENTE la información estructurada solicitada. Sé crítico: si falta información, indícalo.

Tus decisiones deben basarse en las siguientes REGLAS DE NEGOCIO personalizadas:
{rules}

DECISIÓN FINAL:
- KEEP: Si el pliego cumple las reglas y es interesante.
- DISCARD: Si incumple alguna regla bloqueante (Solvencia, ISOs) o no interesa.
- REVIEW: Si faltan datos críticos para decidir (ej: documento de solvencia ilegible o faltante) o hay dudas razonables.

INSTRUCCIONES DE EXTRACCIÓN Y ANÁLISIS:

1. ANÁLISIS ECONÓMICO (PRECIO Y COSTES)
- Presupuesto Base de Licitación (Sin IVA).
- Modelo de Precio: ¿Es a tanto alzado o precios unitarios?
- Base del Cálculo: ¿Qué incluye? (Dietas, desplazamientos, licencias, etc).

2. ALCANCE DEL SERVICIO (QUÉ HAY QUE HACER)
- Resumen del Objeto: Explica en 2-3 frases sencillas qué trabajo hay que entregar.
- Entregables Clave: Lista los productos/informes/servicios principales.

3. RECURSOS Y CRONOGRAMA
- Duración: [Meses/Años] + [Posibles Prórrogas].
- Equipo Mínimo Exigido (Adscripción de Medios): Perfiles, titulación, experiencia mínima.
- Dedicación: ¿Exclusiva? ¿Presencial?

4. REQUISITOS BLOQUEANTES Y SOLVENCIA
- Certificaciones (ISO, ENS, Grupo/Subgrupo).
- Solvencia Técnica Específica (proyectos similares últimos 3 años).
- Penalidades inusuales.

5. ENFOQUE ESTRATÉGICO SUGERIDO
- Ángulo de Ataque: ¿Cómo plantear la propuesta?

6. PUNTUACIÓN DETALLADA (CRÍTICO)
- Desglosa la puntuación en tres categorías (pesos 0-100):
   A) PRECIO (Matemático puro).
   B) FÓRMULAS AUTOMÁTICAS (Objetivo pero no es precio, ej: bolsa de horas, mejoras, certificaciones).
   C) JUICIO DE VALOR (Subjetivo, memoria técnica).
- LISTA CADA SUB-CRITERIO INDIVIDUAL con su peso específico (puntos o %).
  Ejemplo: "Mejoras de plazo" (FORMULA) -> 5. "Plan de trabajo" (VALUE) -> 20.

Devuelve todo en JSON estricto, sin bloques de código markdown, con esta forma exacta:
{ANALYSIS_RESPONSE_SHAPE}"""


def file_part(file: DocumentFile) -> Dict[str, Any]:
    """Inline a file as a LiteLLM content part."""
    encoded = base64.b64encode(file.content).decode('ascii')
    return {
        "type": "file",
        "file": {"file_data": f"data:{file.mime_type};base64,{encoded}"},
    }


def parse_json_text(text: Optional[str]) -> Dict[str, Any]:
    """Parse a JSON reply, tolerating markdown code fences."""
    if not text or not text.strip():
        raise ServiceResponseError("Empty response from the analysis service")

    # Handle potential markdown code blocks
    if "```" in text:
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]

    try:
        result = json.loads(text.strip())
    except json.JSONDecodeError as e:
        raise ServiceResponseError(f"Malformed JSON from the analysis service: {e}") from e

    if not isinstance(result, dict):
        raise ServiceResponseError(f"Expected a JSON object, got {type(result).__name__}")
    return result


class TenderAnalyst:
    """
    Client for the extraction and analysis operations.

    Usage:
        analyst = TenderAnalyst(LLMSettings.from_env())
        metadata = analyst.extract_metadata(summary_file)
        report = analyst.analyze(AnalysisRequest(name=..., rules=...))
    """

    def __init__(self, settings: LLMSettings, completion: Optional[Callable[..., Any]] = None):
        self.settings = settings
        self._completion = completion

    def _get_completion(self) -> Callable[..., Any]:
        if self._completion is None:
            from litellm import completion
            self._completion = completion
        return self._completion

    def _call(self, messages: List[Dict[str, Any]], operation: str) -> str:
        """Send one request and return the reply text."""
        api_key = self.settings.require_api_key()
        completion = self._get_completion()

        start_time = time.time()
        try:
            response = completion(
                model=self.settings.model_id,
                messages=messages,
                api_key=api_key,
                response_format={"type": "json_object"},
                max_tokens=self.settings.max_output_tokens,
                temperature=self.settings.temperature,
                timeout=self.settings.timeout,
            )
        except Exception as e:
            logger.error(f"{operation} call failed: {e}")
            raise ServiceCallError(f"{operation} failed: {e}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        usage = getattr(response, 'usage', None)
        if usage:
            logger.info(f"{operation}: {getattr(usage, 'prompt_tokens', 0)} in / "
                        f"{getattr(usage, 'completion_tokens', 0)} out tokens, {duration_ms}ms")
        else:
            logger.info(f"{operation}: {duration_ms}ms")

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            raise ServiceResponseError(f"{operation}: unexpected response structure") from e

    def extract_metadata(self, file: DocumentFile) -> TenderMetadata:
        """Extract form fields from a summary sheet. Empty reply -> empty metadata."""
        messages = [{
            "role": "user",
            "content": [file_part(file), {"type": "text", "text": METADATA_PROMPT}],
        }]
        text = self._call(messages, "Metadata extraction")
        if not text.strip():
            return TenderMetadata.empty()
        return TenderMetadata.from_dict(parse_json_text(text))

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Produce the feasibility report for one tender."""
        parts: List[Dict[str, Any]] = [{"type": "text", "text": request.header_text()}]
        for label, file in request.labelled_files():
            parts.append({"type": "text", "text": f"--- {label} ---"})
            parts.append(file_part(file))

        messages = [
            {"role": "system", "content": build_analysis_system_prompt(request.rules)},
            {"role": "user", "content": parts},
        ]
        text = self._call(messages, "Tender analysis")
        return AnalysisResult.from_dict(parse_json_text(text))
