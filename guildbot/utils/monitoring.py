"""
Monitoring Utilities
Command metrics and health monitoring
"""

import os
import platform
import time
from typing import Any, Callable, Dict

import psutil

from guildbot.utils.discord import DiscordUtils


class HealthStatus:
    """Health status result."""

    def __init__(self, healthy: bool, status: str, checks: Dict[str, bool], timestamp: str):
        self.healthy = healthy
        self.status = status
        self.checks = checks
        self.timestamp = timestamp


class Monitoring:
    """Command metrics and process health."""

    def __init__(self, client: Any, clock: Callable[[], float] = time.time):
        self.client = client
        self._clock = clock
        self.start_time = clock()
        self.metrics = {
            "commandsExecuted": 0,
            "commandsRejected": 0,
            "messagesProcessed": 0,
            "errors": 0,
        }
        self.rejections: Dict[str, int] = {}

    def record_command(self) -> None:
        self.metrics["commandsExecuted"] += 1

    def record_rejection(self, reason: str) -> None:
        """Count a gate rejection under its reason code."""
        self.metrics["commandsRejected"] += 1
        self.rejections[reason] = self.rejections.get(reason, 0) + 1

    def record_message(self) -> None:
        self.metrics["messagesProcessed"] += 1

    def record_error(self) -> None:
        self.metrics["errors"] += 1

    def uptime(self) -> float:
        """Seconds since monitoring started."""
        return self._clock() - self.start_time

    def calculate_commands_per_hour(self) -> int:
        hours = self.uptime() / 3600
        return round(self.metrics["commandsExecuted"] / hours) if hours > 0 else 0

    def get_system_metrics(self) -> Dict[str, Any]:
        """
        Get system metrics.

        Returns:
            Dict with memory, CPU and platform info
        """
        process = psutil.Process()
        memory_info = process.memory_info()
        load_avg = os.getloadavg() if hasattr(os, "getloadavg") else (0.0, 0.0, 0.0)

        return {
            "memory": {
                "used": round(memory_info.rss / 1024 / 1024),
                "systemTotal": round(psutil.virtual_memory().total / 1024 / 1024),
            },
            "cpu": {
                "loadAvg1m": round(load_avg[0], 2),
                "cores": psutil.cpu_count(),
            },
            "platform": {
                "python": platform.python_version(),
                "os": f"{platform.system()} {platform.release()}",
            },
        }

    def get_discord_metrics(self) -> Dict[str, Any]:
        """Latency and guild count from the client, when it is connected."""
        latency = getattr(self.client, "latency", 0.0)
        guilds = getattr(self.client, "guilds", None) or []
        return {
            # latency is inf/nan until the first heartbeat
            "ping": latency * 1000 if latency == latency and latency != float("inf") else 0.0,
            "guilds": len(guilds),
            "ready": bool(getattr(self.client, "is_ready", lambda: False)()),
        }

    def get_health_status(self) -> HealthStatus:
        system = self.get_system_metrics()
        discord = self.get_discord_metrics()

        checks = {
            "memory": system["memory"]["used"] < system["memory"]["systemTotal"] * 0.8,
            "discord": discord["ready"],
            "ping": discord["ping"] < 500,
            "errors": self.metrics["errors"] < 100,
        }
        healthy = all(checks.values())

        return HealthStatus(
            healthy=healthy,
            status="healthy" if healthy else "degraded",
            checks=checks,
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        )

    def format_health_status(self) -> str:
        """
        Format health status for display.

        Returns:
            Formatted health status string
        """
        health = self.get_health_status()
        system = self.get_system_metrics()
        discord = self.get_discord_metrics()

        status_icon = "🟢" if health.healthy else "🟡"

        lines = [
            f"{status_icon} **Bot Health Status: {health.status.upper()}**",
            "",
            "📊 **System:**",
            f"Memory: {system['memory']['used']}MB / {system['memory']['systemTotal']}MB",
            f"CPU Load: {system['cpu']['loadAvg1m']} ({system['cpu']['cores']} cores)",
            "",
            "🤖 **Discord:**",
            f"Ping: {discord['ping']:.0f}ms",
            f"Guilds: {discord['guilds']}",
            "",
            "📈 **Commands:**",
            f"Executed: {self.metrics['commandsExecuted']} ({self.calculate_commands_per_hour()}/hr)",
            f"Rejected: {self.metrics['commandsRejected']}",
            f"Errors: {self.metrics['errors']}",
            "",
            f"⏱️ **Uptime:** {DiscordUtils.format_duration(self.uptime())}",
        ]

        return "\n".join(lines)

    def get_full_status(self) -> Dict[str, Any]:
        health = self.get_health_status()
        return {
            "health": {
                "healthy": health.healthy,
                "status": health.status,
                "checks": health.checks,
                "timestamp": health.timestamp,
            },
            "discord": self.get_discord_metrics(),
            "metrics": {**self.metrics, "rejections": dict(self.rejections)},
            "uptime": round(self.uptime()),
        }
