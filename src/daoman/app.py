"""Wire providers, the relay and speech services from the environment."""

import logging
from dataclasses import dataclass

import httpx

from .agent import CompletionClient, Persona, Relay, parse_fewshots
from .config import (
    completion_config_from_env,
    prompt_config_from_env,
    speech_config_from_env,
)
from .grounding import FactAssembler
from .logging import JSONLLogger, get_logger
from .providers import CoinPaprikaClient, DexScreenerClient, search_from_env
from .providers.http import new_client
from .speech import ElevenLabsSynthesizer, GroqTranscriber, Speaker, VoiceReferenceStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything a front-end needs to answer questions."""

    relay: Relay
    speaker: Speaker
    transcriber: GroqTranscriber
    voices: VoiceReferenceStore
    paprika: CoinPaprikaClient
    dexscreener: DexScreenerClient
    synthesizer: ElevenLabsSynthesizer
    http_client: httpx.AsyncClient

    async def close(self) -> None:
        """Close the HTTP clients the services opened."""
        await self.paprika.close()
        await self.dexscreener.close()
        await self.http_client.aclose()


def build_persona() -> Persona:
    """Persona with word limit and few-shots from the environment."""
    prompt_config = prompt_config_from_env()
    return Persona(
        max_words=prompt_config.max_words,
        fewshots=parse_fewshots(prompt_config.fewshots_raw),
    )


def build_services(event_log: JSONLLogger | None = None) -> Services:
    """Build the full service graph.

    Missing keys do not fail here: the completion, transcription and
    synthesis clients raise AuthConfigError on first use instead, and a
    missing search chain just marks web results as unavailable.
    """
    event_log = event_log or get_logger()
    persona = build_persona()

    http_client = new_client()
    search = search_from_env(client=http_client)
    if search is None:
        logger.warning("No web search provider available")

    paprika = CoinPaprikaClient()
    dexscreener = DexScreenerClient()
    assembler = FactAssembler(
        search=search,
        prices=paprika,
        tokens=dexscreener,
        market=paprika,
        static_context=persona.static_context,
        context_label=persona.context_label,
        event_log=event_log,
    )

    completion = CompletionClient(config=completion_config_from_env(), event_log=event_log)
    relay = Relay(assembler, completion, persona=persona, event_log=event_log)

    speech_config = speech_config_from_env()
    voices = VoiceReferenceStore(max_age=speech_config.voice_ref_ttl)
    synthesizer = ElevenLabsSynthesizer(speech_config, client=http_client)
    transcriber = GroqTranscriber(
        api_key=speech_config.groq_api_key,
        model=speech_config.stt_model,
    )

    return Services(
        relay=relay,
        speaker=Speaker(synthesizer, voices, event_log=event_log),
        transcriber=transcriber,
        voices=voices,
        paprika=paprika,
        dexscreener=dexscreener,
        synthesizer=synthesizer,
        http_client=http_client,
    )
