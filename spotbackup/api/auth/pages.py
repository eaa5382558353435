"""HTML page handing the access token back to the window that opened the login popup."""

import html
import json
from urllib.parse import quote


def _js_literal(value: str) -> str:
    # json.dumps does not escape "</", which would close the script element.
    return json.dumps(value).replace("</", "<\\/")


def render_token_page(token: str, fallback_origin: str) -> str:
    """
    Build the callback success page.

    The token is posted to window.opener, targeting the opener's own origin
    when it can be read and `fallback_origin` (scheme, host and port of the
    public URI) otherwise. Without a usable opener (blocked popup) the page
    navigates to /#token=<token> instead.
    """
    hash_link = html.escape("/#token=" + quote(token, safe=""), quote=True)
    script = f"""window.onload = () => {{
  const opener = window.opener;
  const token = {_js_literal(token)};
  let targetOrigin = {_js_literal(fallback_origin)};
  const hash = "#token=" + encodeURIComponent(token);

  try {{
    if (opener && opener.location && opener.location.origin) {{
      targetOrigin = opener.location.origin;
    }}
  }} catch (err) {{
    console.warn("unable to read opener origin", err);
  }}

  if (opener && !opener.closed) {{
    try {{
      opener.postMessage({{token}}, targetOrigin);
      window.close();
      return;
    }} catch (err) {{
      console.warn("postMessage to opener failed", err);
    }}
  }}

  try {{
    window.location.replace("/" + hash);
  }} catch (err) {{
    console.warn("unable to redirect to home with hash token", err);
  }}
}};"""
    return (
        "<!doctype html><html><body><script>"
        + script
        + "</script>"
        + "<p>Login complete. You can close this window.</p>"
        + "<p>If it does not close automatically, return to the original tab.</p>"
        + f'<p>If nothing happens, <a href="{hash_link}">click here to continue</a>.</p>'
        + "</body></html>"
    )
