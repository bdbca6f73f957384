"""Project scaffolding templates — plain Python strings for ``pagewright new``.

Simple ``str.format()`` substitution with ``{name}`` for the project
name; literal braces in page markup are doubled.
"""

APP_PY = """\
from pagewright import App, AppConfig

app = App(AppConfig(debug=True, pages_dir="pages"))

app.expose_variable("site_name", "{name}")


@app.expose
def greet(who):
    return f"Hello, {{who}}!"


if __name__ == "__main__":
    app.run()
"""

LAYOUT_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{name}</title>
</head>
<body>
    <header><a href="/">{name}</a> · <a href="/blog/hello-world">Blog</a></header>
    <main>
        <%content%>
    </main>
</body>
</html>
"""

INDEX_HTML = """\
<h1>Welcome to {name}</h1>
<p>Edit <code>pages/index.html</code> and reload.</p>
<button id="greet">Say hello</button>
<p id="greeting"></p>
<script>
    document.getElementById("greet").addEventListener("click", async () => {{
        const text = await pagewright.fn.greet(pagewright.vars.site_name);
        document.getElementById("greeting").textContent = text;
    }});
</script>
"""

NOT_FOUND_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>Not found — {name}</title></head>
<body>
    <h1>Page not found</h1>
    <p><a href="/">Back home</a></p>
</body>
</html>
"""

POST_HTML = """\
<article>
    <h1>Post: {{slug}}</h1>
    <p>This page serves every <code>/blog/&lt;slug&gt;</code> URL.</p>
</article>
"""
