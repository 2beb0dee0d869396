"""
LiveKit voice agent entry point for the agency receptionist.

Configures the STT -> LLM -> TTS pipeline with multilingual turn detection,
preemptive generation and background noise cancellation, gives each call
(one LiveKit room) its own session state, and logs a masked summary plus
pipeline usage when the call ends. Console mode replays scripted calls
through the tool layer without any API keys.

Usage:
    Model files:  python main.py download-files
    Live voice:   python main.py dev
    Console mode: python main.py console [--scenario NAME]
"""

import logging
import sys
from typing import Optional

from receptionist.config import settings
from receptionist.conversation.session_store import SessionStore
from receptionist.directory.client import get_directory_client
from receptionist.logging_context import safe_log, set_session_id
from receptionist.tools.dispatcher import ToolDispatcher

logger = logging.getLogger(__name__)

# Shared by every call handled by this worker process.
store = SessionStore()
dispatcher = ToolDispatcher(store, get_directory_client())


def prewarm(proc) -> None:
    """Load the VAD model once per worker process."""
    from livekit.plugins import silero

    proc.userdata["vad"] = silero.VAD.load()


def _build_session(vad, session_id: str):
    """Build a new AgentSession with the configured STT/LLM/TTS pipeline."""
    from livekit.agents import AgentSession
    from livekit.plugins import cartesia, deepgram, openai
    from livekit.plugins.turn_detector.multilingual import MultilingualModel

    from receptionist.agents.receptionist_agent import SessionUserData

    return AgentSession[SessionUserData](
        stt=deepgram.STT(
            model=settings.model.stt_model,
            language=settings.model.stt_language,
        ),
        llm=openai.LLM(
            model=settings.model.llm_model,
            temperature=settings.model.llm_temperature,
        ),
        tts=cartesia.TTS(
            model=settings.model.tts_model,
            voice=settings.model.tts_voice_id,
            speed=settings.model.tts_speed,
        ),
        vad=vad,
        turn_detection=MultilingualModel(),
        preemptive_generation=settings.model.preemptive_generation,
        userdata=SessionUserData(session_id=session_id),
    )


def _noise_cancellation(mode: str) -> Optional[object]:
    """Noise cancellation filter for the caller's audio, or None when off."""
    if mode == "off":
        return None
    from livekit.plugins import noise_cancellation

    if mode == "telephony":
        return noise_cancellation.BVCTelephony()
    return noise_cancellation.BVC()


def _collect_usage(session):
    """Log per-turn pipeline metrics and aggregate them for the call."""
    from livekit.agents import MetricsCollectedEvent, metrics

    usage_collector = metrics.UsageCollector()

    @session.on("metrics_collected")
    def _on_metrics_collected(ev: MetricsCollectedEvent) -> None:
        metrics.log_metrics(ev.metrics)
        usage_collector.collect(ev.metrics)

    return usage_collector


async def entrypoint(ctx) -> None:
    """LiveKit agent entrypoint, module-level so workers can pickle it."""
    from livekit.agents import RoomInputOptions
    from livekit.plugins import silero

    from receptionist.agents.receptionist_agent import ReceptionistAgent

    session_id = ctx.room.name
    set_session_id(session_id)
    await store.get_or_create(session_id)

    vad = ctx.proc.userdata.get("vad") or silero.VAD.load()
    session = _build_session(vad, session_id)
    usage_collector = _collect_usage(session)

    async def _on_shutdown() -> None:
        logger.info("Usage: %s", usage_collector.get_summary())
        state = await store.get(session_id)
        if state is not None:
            safe_log("Call summary:", state.summary(), logger=logger)
        await store.end_session(session_id)

    ctx.add_shutdown_callback(_on_shutdown)

    await session.start(
        room=ctx.room,
        agent=ReceptionistAgent(dispatcher),
        room_input_options=RoomInputOptions(
            noise_cancellation=_noise_cancellation(settings.model.noise_cancellation),
        ),
    )
    await ctx.connect()
    logger.info("Receptionist session started in room: %s", session_id)


def _run_voice_mode() -> None:
    """Start the full LiveKit voice pipeline (requires API keys)."""
    from livekit.agents import WorkerOptions, cli

    worker = WorkerOptions(
        entrypoint_fnc=entrypoint,
        prewarm_fnc=prewarm,
        agent_name=settings.agent_name,
    )
    cli.run_app(worker)


def _run_console_mode(argv: list[str]) -> None:
    """Replay scripted calls against the tool layer (no API keys required)."""
    from console_demo import main as console_main

    console_main(argv)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode(sys.argv[2:])
    else:
        _run_voice_mode()
