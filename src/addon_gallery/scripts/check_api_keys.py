#!/usr/bin/env python3
"""
Check connectivity to the GitHub API and the Gemini API with the configured keys.
"""

import httpx
from google import genai
from addon_gallery.config import settings
from rich.console import Console

console = Console()


def check_github() -> None:
    url = f"{settings.github_api_url}/rate_limit"
    try:
        response = httpx.get(url, headers=settings.github_headers, timeout=settings.http_timeout)
        if response.status_code == 200:
            core = response.json().get("resources", {}).get("core", {})
            console.print("[green]✅ GitHub API reachable")
            console.print(f"[green]Rate limit:[/green] {core.get('remaining')}/{core.get('limit')} remaining")
        elif response.status_code == 401:
            console.print("[red]❌ Invalid GitHub token (401 Unauthorized)")
        else:
            console.print(f"[yellow]⚠️ Unexpected response: {response.status_code}")
            console.print(f"Body: {response.text}")
    except httpx.RequestError as e:
        console.print(f"[red]❌ GitHub request failed: {e}")


def check_gemini() -> None:
    if not settings.gemini_api_key:
        console.print("[red]❌ GEMINI_API_KEY is not set in .env or environment.")
        return

    try:
        client = genai.Client(api_key=settings.gemini_api_key)
        response = client.models.generate_content(model=settings.gemini_model, contents="Reply with OK.")
        console.print(f"[green]✅ Gemini key valid! Model {settings.gemini_model} replied: {response.text!r}")
    except Exception as e:
        console.print(f"[red]❌ Gemini request failed: {e}")


def main():
    console.print("[bold cyan]Running API key checks...")
    check_github()
    check_gemini()


if __name__ == "__main__":
    main()
