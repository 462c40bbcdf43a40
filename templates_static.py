"""Templates and static file generation."""

from pathlib import Path

# Template content
BASE_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  {% block head %}{% endblock %}
  <title>{{ title or 'Thumbnail Server' }}</title>
  <link rel="stylesheet" href="/static/app.css">
</head>
<body>
  <header class="topbar">
    <nav>
      <a href="/" class="brand">Thumbnail Server</a>
      <a href="/images">All images (JSON)</a>
    </nav>
  </header>
  <main class="container">
    {% block content %}{% endblock %}
  </main>
</body>
</html>
"""

INDEX_HTML = """{% extends 'base.html' %}
{% block content %}
<h1>Upload</h1>
<form class="panel" method="post" action="/upload" enctype="multipart/form-data">
  <label>Tags</label>
  <input name="tags" placeholder="cat, garden" />
  <label>Image</label>
  <input type="file" name="image" accept="image/*" required />
  <button>Upload</button>
</form>

<h1>Search</h1>
<form class="panel" id="searchForm" method="post" action="/search">
  <input name="tags" placeholder="Tag substring…" />
  <button>Search</button>
</form>
<div id="results" class="grid"></div>
<script>
document.getElementById('searchForm').addEventListener('submit', async (e) => {
  e.preventDefault();
  const resp = await fetch('/search', {method: 'POST', body: new FormData(e.target)});
  document.getElementById('results').innerHTML = await resp.text();
});
</script>
{% endblock %}
"""

UPLOADED_HTML = """{% extends 'base.html' %}
{% block head %}<meta http-equiv="refresh" content="{{ delay }}; url={{ url }}" />{% endblock %}
{% block content %}
<div class="flash success">
  Uploaded image #{{ image_id }}. Its thumbnail is being generated.
  <a href="{{ url }}">Continue</a>
</div>
{% endblock %}
"""

# Returned as a fragment, not a full page.
SEARCH_HTML = """{% for record in records %}
<a class="card" href="/image/{{ record.id }}" title="{{ record.tags }}">
  <img src="/thumb/{{ record.id }}" alt="{{ record.tags }}" loading="lazy" />
  <span class="muted">#{{ record.id }} {{ record.tags }}</span>
</a>
{% else %}
<p class="muted">No images match "{{ query }}".</p>
{% endfor %}
"""

APP_CSS = """:root{--bg:#0f1115;--fg:#e5e7eb;--muted:#a1a1aa;--card:#111318;--brand:#7aa2ff}
*{box-sizing:border-box}body{margin:0;background:var(--bg);color:var(--fg);font:14px/1.5 system-ui,sans-serif}
a{color:var(--brand)}
.topbar{background:#0b0d12;border-bottom:1px solid #1c1f26}
.topbar nav{display:flex;gap:16px;align-items:center;padding:10px 16px}
.brand{font-weight:700;text-decoration:none}
.container{max-width:960px;margin:0 auto;padding:16px}
.panel{display:grid;gap:10px;max-width:480px;margin-bottom:20px}
input{background:#0e1218;border:1px solid #232a39;color:var(--fg);padding:6px 10px;border-radius:8px;width:100%}
button{background:var(--brand);color:#fff;border:none;padding:8px 14px;border-radius:8px;cursor:pointer}
.grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(120px,1fr));gap:12px}
.card{display:flex;flex-direction:column;align-items:center;gap:4px;background:var(--card);border:1px solid #1f2430;border-radius:8px;padding:8px;text-decoration:none}
.card img{max-width:100px;max-height:100px}
.muted{color:var(--muted);font-size:12px}
.flash{background:#13221d;border:1px solid #214d39;padding:10px;border-radius:10px}
"""


def ensure_assets(templates_dir: Path, static_dir: Path) -> None:
    """Create templates/static on first run so the app needs no separate asset tree."""
    templates_dir.mkdir(parents=True, exist_ok=True)
    static_dir.mkdir(parents=True, exist_ok=True)
    files = {
        templates_dir / "base.html": BASE_HTML,
        templates_dir / "index.html": INDEX_HTML,
        templates_dir / "uploaded.html": UPLOADED_HTML,
        templates_dir / "search.html": SEARCH_HTML,
        static_dir / "app.css": APP_CSS,
    }
    for p, content in files.items():
        if not p.exists():
            p.write_text(content, encoding="utf-8")
