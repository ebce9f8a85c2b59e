# ==============================================================================
# Config Commands
# ==============================================================================
"""
Show the effective configuration (environment variables and .env).
"""

import json
from typing import Annotated

import typer

from clicksignals.cli.shared import C
from clicksignals.utils.config import get_settings


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "session": settings.session.model_dump(),
            "frustration": settings.frustration.model_dump(),
            "performance": settings.performance.model_dump(),
            "dispatcher": settings.dispatcher.model_dump(),
            "kafka": {
                "bootstrap_servers": [
                    s.strip() for s in settings.kafka.bootstrap_servers.split(",")
                ],
                "security_protocol": settings.kafka.security_protocol,
                "ssl_enabled": settings.kafka.security_protocol == "SSL",
                "signals_topic": settings.kafka.signals_topic,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    session = settings.session
    frustration = settings.frustration
    performance = settings.performance

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Session{C.RESET}")
    print(f"  Idle timeout:     {C.WHITE}{session.idle_timeout_ms / 1000:.0f}s{C.RESET}")
    print(f"  Update throttle:  {C.WHITE}{session.activity_throttle_ms / 1000:.0f}s{C.RESET}")
    print(f"  Storage key:      {C.WHITE}{session.storage_key}{C.RESET}")
    print()

    print(f"{C.CYAN}Frustration{C.RESET}")
    print(
        f"  Rage click:       {C.WHITE}{frustration.rage_min_clicks}+ clicks in "
        f"{frustration.rage_window_ms}ms within {frustration.rage_radius_px:g}px{C.RESET}"
    )
    print(
        f"  Rapid clicks:     {C.WHITE}{frustration.rapid_min_clicks}+ clicks in "
        f"{frustration.buffer_window_ms}ms{C.RESET}"
    )
    print(f"  Cooldown:         {C.WHITE}{frustration.cooldown_ms}ms{C.RESET}")
    print()

    print(f"{C.CYAN}Performance{C.RESET}")
    print(f"  TTFB:             {C.WHITE}> {performance.ttfb_threshold_ms:g}ms{C.RESET}")
    print(f"  LCP:              {C.WHITE}> {performance.lcp_threshold_ms:g}ms{C.RESET}")
    print(f"  CLS:              {C.WHITE}> {performance.cls_threshold:g}{C.RESET}")
    print(
        f"  Long tasks:       {C.WHITE}any > {performance.long_task_severe_ms:g}ms or "
        f"{performance.long_task_slow_count}+ > {performance.long_task_slow_ms:g}ms{C.RESET}"
    )
    print()

    print(f"{C.CYAN}Delivery{C.RESET}")
    print(f"  Sink:             {C.WHITE}{settings.dispatcher.sink}{C.RESET}")
    print(f"  Session store:    {C.WHITE}{settings.dispatcher.store}{C.RESET}")
    print(f"  Queue size:       {C.WHITE}{settings.dispatcher.max_queue_size}{C.RESET}")
    print()

    print(f"{C.CYAN}Kafka{C.RESET}")
    servers = settings.kafka.bootstrap_servers.split(",")
    for i, server in enumerate(servers):
        label = "  Bootstrap:        " if i == 0 else "                    "
        print(f"{label}{C.WHITE}{server.strip()}{C.RESET}")
    kafka_ssl = (
        "mTLS (client certificates)" if settings.kafka.security_protocol == "SSL" else "disabled"
    )
    print(f"  SSL:              {C.WHITE}{kafka_ssl}{C.RESET}")
    print(f"  Topic:            {C.WHITE}{settings.kafka.signals_topic}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:             {C.WHITE}{settings.valkey.host}:{settings.valkey.port}{C.RESET}")
    print(f"  SSL:              {C.WHITE}{'enabled' if settings.valkey.ssl else 'disabled'}{C.RESET}")
    print()
