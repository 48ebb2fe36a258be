#!/usr/bin/env python3
"""
web_remote.py  –  operator web UI + diagnostics + remote control

Endpoints
---------
/               → HTML page with choice buttons, status text, diagnostics
/state          → JSON array of status lines
/diag, /data    → JSON object of diagnostic metrics
/action?cmd=…   → inject control commands (success, failure, offset, toggle, quit)
/log            → contents of the runtime log (if present)
"""

from __future__ import annotations
import http.server
import socketserver
import threading
import urllib.parse
import json
import logging
import time
import os
import traceback
import psutil
import platform
from typing import TYPE_CHECKING, Any

from events   import EventManager
from sequence import Phase
import config

if TYPE_CHECKING:                       # avoid circular import at runtime
    from app import QuizPlayer

log = logging.getLogger(__name__)

# ── diagnostics refresh cadence ───────────────────────────────────────────
_last_diag_time = 0.0
_diag_interval  = getattr(config, "DIAG_REFRESH_INTERVAL", 1.0)

# ── global diagnostic store ───────────────────────────────────────────────
monitor_data: dict[str, Any] = {
    "cpu_percent":       0.0,
    "cpu_per_core":      [],
    "mem_used":          "0 MB",
    "mem_total":         "0 MB",
    "script_uptime":     "0d 00:00:00",
    "machine_uptime":    "0d 00:00:00",
    "load_avg":          "",
    "last_http_crash":   "",
    "python_version":    platform.python_version(),
}

_script_start = time.monotonic()
_boot_time    = psutil.boot_time()

_SIMPLE_CMDS = {
    "success": {"type": "choice", "choice": "success"},
    "failure": {"type": "choice", "choice": "failure"},
    "toggle":  {"type": "toggle_overlay"},
    "quit":    {"type": "quit"},
}


# ── helpers ────────────────────────────────────────────────────────────────
def _fmt_duration(secs: float) -> str:
    d, rem = divmod(int(secs), 86400)
    h, rem = divmod(rem, 3600)
    m, s   = divmod(rem, 60)
    return f"{d}d {h:02}:{m:02}:{s:02}"


def _maybe_update_diagnostics() -> None:
    global _last_diag_time
    now = time.monotonic()
    if now - _last_diag_time >= _diag_interval:
        _last_diag_time = now
        _update_diagnostics()


def _update_diagnostics() -> None:
    """Refresh CPU, memory, uptime and load in `monitor_data`."""
    per_core = psutil.cpu_percent(percpu=True)
    avg_cpu  = sum(per_core) / len(per_core) if per_core else 0.0
    monitor_data["cpu_percent"]  = round(avg_cpu, 1)
    monitor_data["cpu_per_core"] = [round(p, 1) for p in per_core]
    vm = psutil.virtual_memory()
    monitor_data["mem_used"]  = f"{vm.used // 1024**2} MB"
    monitor_data["mem_total"] = f"{vm.total // 1024**2} MB"
    now = time.monotonic()
    monitor_data["script_uptime"]  = _fmt_duration(now - _script_start)
    monitor_data["machine_uptime"] = _fmt_duration(time.time() - _boot_time)
    try:
        la = os.getloadavg()
        monitor_data["load_avg"] = ", ".join(f"{x:.2f}" for x in la)
    except OSError:
        monitor_data["load_avg"] = "N/A"


def parse_action(query: str) -> dict | None:
    """Translate an /action query string into an action dict (None = bad)."""
    qs  = urllib.parse.parse_qs(query)
    cmd = qs.get("cmd", [""])[0]

    if cmd in _SIMPLE_CMDS:
        return dict(_SIMPLE_CMDS[cmd])
    if cmd == "offset":
        # offset in *milliseconds* (can be ±)
        try:
            delta_ms = float(qs.get("ms", ["0"])[0])
        except ValueError:
            return None
        return {"type": "adjust_offset", "delta": delta_ms / 1000.0}
    return None


# ── reusable threaded HTTP server ──────────────────────────────────────────
class ReusableTCPServer(socketserver.ThreadingMixIn, http.server.HTTPServer):
    daemon_threads      = True
    allow_reuse_address = True


# ── status text builder (for /state endpoint) ──────────────────────────────
def state_lines(player: "QuizPlayer") -> list[str]:
    flow   = player.flow
    total  = len(flow.questions)
    off_ms = player.subtitles.offset * 1000.0

    lines: list[str] = [f"Subtitle offset  Δ{off_ms:+.0f} ms"]
    if not flow.started:
        lines.append("Not started")
    elif flow.complete:
        lines.append(f"Sequence complete ({total} questions)")
    else:
        lines.append(f"Question {flow.index + 1:02d}/{total:02d}  attempt {flow.attempt}")
        if flow.awaiting_choice:
            lines.append("Awaiting choice")
        elif flow.phase is Phase.QUESTION:
            lines.append(f"Playing question ({player.session.state})")
        else:
            lines.append(f"Playing {flow.phase.value} outcome ({player.session.state})")

    caption = player.subtitles.text.replace("\n", " / ")
    lines.append(f"Caption  {caption}" if caption else "Caption  —")
    return lines


# ── request handler ────────────────────────────────────────────────────────
class RemoteHandler(http.server.BaseHTTPRequestHandler):
    def log_message(self, *args):
        return  # silence default logging

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        path, qs = parsed.path, parsed.query

        if path == "/":
            return self._serve_html()
        if path == "/state":
            return self._serve_json(state_lines(self.server.player))   # type: ignore
        if path in ("/diag", "/data"):
            _maybe_update_diagnostics()
            return self._serve_json(monitor_data)
        if path == "/log":
            return self._serve_log()
        if path == "/action":
            return self._serve_action(qs)

        self.send_error(404, "Not found")

    # ── helpers for each route ───────────────────────────────────────────
    def _serve_html(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/html")
        self.end_headers()
        self.wfile.write(HTML_PAGE.encode("utf-8"))

    def _serve_json(self, obj: Any):
        b = json.dumps(obj).encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(b)))
        self.end_headers()
        self.wfile.write(b)

    def _serve_log(self):
        try:
            with open(config.LOG_FILE, "rb") as f:
                data = f.read()
        except OSError:
            return self.send_error(404, "Log file not found")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _serve_action(self, query: str):
        act = parse_action(query)
        if act is None:
            return self.send_error(400, "Unknown cmd")
        EventManager.post(act)
        self.send_response(204)
        self.end_headers()


# ── simple HTML UI ─────────────────────────────────────────────────────────
HTML_PAGE = """
<!doctype html><html><head><meta charset="utf-8">
<title>Narrative Remote & Diagnostics</title>
<style>
 body{background:#000;color:#0f0;font-family:monospace;padding:1em;}
 button{margin:4px;padding:6px 12px;border:1px solid #0f0;background:#000;
        color:#0f0;font-family:monospace;cursor:pointer;}
 pre{margin:0.5em 0;font-family:monospace;}
</style></head><body>
<h2>Narrative Remote</h2>
<!-- operator choice -->
<button onclick="act('success')">✔ Correct</button>
<button onclick="act('failure')">✘ Wrong</button>

<!-- live subtitle offset nudges -->
<button onclick="act('offset&ms=-20')">−20 ms</button>
<button onclick="act('offset&ms=20')">+20 ms</button>
<button onclick="act('offset&ms=-100')">−100 ms</button>
<button onclick="act('offset&ms=100')">+100 ms</button>

<!-- misc -->
<button onclick="act('toggle')">Toggle overlay</button>
<button onclick="act('quit')">Quit</button>
<a href="/log" style="color:#0f0">View log</a>

<div><h3>State</h3><pre id="state"></pre></div>
<div><h3>Diagnostics</h3><pre id="diag"></pre></div>

<script>
 function act(cmd){ fetch('/action?cmd=' + cmd); }
 async function refreshUI(){
   try {
     let s  = await fetch('/state'); let st = await s.json();
     document.getElementById('state').textContent = st.join('\\n');
     let d  = await fetch('/diag');  let dg = await d.json();
     let txt = '';
     for (let [k,v] of Object.entries(dg)){
       txt += k.padEnd(20,' ') + v + '\\n';
     }
     document.getElementById('diag').textContent = txt;
   } catch(e){
     console.error(e);
   }
 }
 setInterval(refreshUI, 250);
 refreshUI();
</script>
</body></html>
"""


# ── server bootstrap with auto-restart ────────────────────────────────────
def start(player: "QuizPlayer", port: int = getattr(config, "WEB_PORT", 8080)):
    def _serve_loop():
        while True:
            try:
                with ReusableTCPServer(("", port), RemoteHandler) as httpd:
                    httpd.player = player
                    httpd.serve_forever()
            except Exception:
                monitor_data["last_http_crash"] = traceback.format_exc()
                log.exception("web remote crashed, restarting")
                time.sleep(1)

    threading.Thread(target=_serve_loop, daemon=True).start()
    log.info("web remote & diagnostics listening on port %d", port)
