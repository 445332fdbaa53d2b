"""HTML homepage renderer."""

from __future__ import annotations

import html

from starlette.responses import HTMLResponse


_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Favicons Proxy - Easy Favicon Integration for Any Website</title>
    <meta name="description" content="Favicons Proxy: A simple and efficient way to add favicons to your website. Supports multiple sources including Google, DuckDuckGo, and Icon Horse.">
    <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; padding: 20px; max-width: 800px; margin: 0 auto; }}
        h1 {{ color: #333; }}
        code {{ background-color: #f4f4f4; padding: 2px 5px; border-radius: 3px; }}
    </style>
</head>
<body>
    <h1>Favicons Proxy</h1>
    <p>Welcome to the Favicons Proxy service. This tool allows you to easily add favicons to your website by proxying requests through multiple sources.</p>

    <h2>Demo</h2>
    <p>Here are some example favicons:</p>
    <p>
        <img src="{origin}/google.com.ico" alt="Google Favicon"> Google<br>
        <img src="{origin}/github.com.ico" alt="GitHub Favicon"> GitHub<br>
        <img src="{origin}/stackoverflow.com.ico" alt="Stack Overflow Favicon"> Stack Overflow
    </p>

    <h2>How to Use</h2>
    <p>To use the Favicons Proxy in your HTML, simply use the following format in your <code>&lt;link&gt;</code> tag:</p>
    <pre><code>&lt;link rel="icon" href="{origin}/example.com.ico" type="image/x-icon"&gt;</code></pre>
    <p>Replace <code>example.com</code> with the domain you want to fetch the favicon for.</p>

    <h2>Features</h2>
    <ul>
        <li>Fetches favicons from multiple sources (Google, DuckDuckGo, Icon Horse)</li>
        <li>Handles failed requests gracefully</li>
        <li>Caches successful responses for improved performance</li>
        <li>Simple to use with a clean URL structure</li>
    </ul>

    <h2>API Usage</h2>
    <p>You can also use this service as an API. Simply make a GET request to:</p>
    <pre><code>{origin}/example.com.ico</code></pre>
    <p>This will return the favicon for example.com.</p>

    <footer>
        <p>Created by Sead Feng | <a href="https://github.com/seadfeng/favicons-proxy">GitHub Repository</a></p>
    </footer>
</body>
</html>
"""


def render_homepage_html(origin: str) -> str:
    return _TEMPLATE.format(origin=html.escape(origin, quote=True))


def homepage_response(origin: str) -> HTMLResponse:
    return HTMLResponse(render_homepage_html(origin))
