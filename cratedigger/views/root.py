# cratedigger/views/root.py
'''
This module provides the root and health check views.
- The root view serves a simple HTML page prompting users to connect their Spotify account.
- The health view returns a JSON response indicating the service is operational.
'''

from django.http import HttpResponse, JsonResponse

def root(_request):
    return HttpResponse("""
      <html>
        <head><title>Crate Digger</title></head>
        <body style="font-family: sans-serif; padding: 24px;">
          <h1>Crate Digger</h1>
          <p>Connect your Spotify to start digging.</p>
          <a href="/api/auth/spotify/login"
             style="display:inline-block;padding:10px 14px;background:#1DB954;color:#fff;text-decoration:none;border-radius:6px;">
             Connect Spotify
          </a>
          <form method="post" action="/api/auth/spotify/logout" style="margin-top:16px;">
            <button type="submit">Log out</button>
          </form>
        </body>
      </html>
    """)

def health(_request):
    return JsonResponse({"ok": True})
