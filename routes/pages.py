# routes/pages.py
from html import escape

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["Pages"])

SIGNIN_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Sign in · MissionBoard</title>
</head>
<body>
  <main>
    <h1>Sign in</h1>
    <form id="signin" data-callback-url="{callback_url}">
      <label>Email <input type="email" name="email" required></label>
      <label>Password <input type="password" name="password" required></label>
      <button type="submit">Sign in</button>
    </form>
    <p id="error" role="alert"></p>
  </main>
  <script>
    const form = document.getElementById("signin");
    form.addEventListener("submit", async (event) => {{
      event.preventDefault();
      const body = {{ email: form.email.value, password: form.password.value }};
      const res = await fetch("/api/auth/login", {{
        method: "POST",
        headers: {{ "Content-Type": "application/json" }},
        credentials: "include",
        body: JSON.stringify(body),
      }});
      if (res.ok) {{
        window.location.assign(form.dataset.callbackUrl || "/dashboard");
      }} else {{
        const data = await res.json();
        document.getElementById("error").textContent = data.message || "Sign in failed";
      }}
    }});
  </script>
</body>
</html>
"""


def safe_callback(callback_url: str) -> str:
    # Only same-site relative paths
    if not callback_url.startswith("/") or callback_url.startswith("//"):
        return "/dashboard"
    return callback_url


# ========================================
# 🔐 Sign-in page
# ========================================
@router.get("/auth/signin", response_class=HTMLResponse)
def signin_page(callback_url: str = Query(default="/dashboard", alias="callbackUrl")):
    return SIGNIN_TEMPLATE.format(callback_url=escape(safe_callback(callback_url), quote=True))
