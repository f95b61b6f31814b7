"""Inline HTML pages for the frame gallery."""

from html import escape

from custom_frames.domain.frames import (
    FRAME_HEIGHT,
    FRAME_WIDTH,
    FrameRecord,
    SteamProfile,
)


def render_index_page(
    frames: list[FrameRecord],
    *,
    viewer_id: str | None,
    profile: SteamProfile | None,
    message: str | None = None,
    error: str | None = None,
    heading: str | None = None,
) -> str:
    """Render the gallery with either the upload form or a sign-in prompt."""
    parts: list[str] = []
    if viewer_id is None:
        parts.append(
            "<p>In order to upload you must "
            '<a href="/login">sign in with Steam</a>.</p>'
            "<p>Your Steam name, id, and profile link are stored with your frames.</p>"
        )
        parts.append(_notices(message, error))
    else:
        parts.append(_greeting(profile))
        parts.append(_upload_form(message, error))
    if heading:
        parts.append(f"<h2>{escape(heading)}</h2>")
    parts.append(_frames_grid(frames, viewer_id))
    return _layout("\n".join(parts))


def _greeting(profile: SteamProfile | None) -> str:
    links = (
        '<a href="/">All frames</a> | '
        '<a href="/my-frames">My frames</a> | '
        '<a href="/logout">Log out</a>'
    )
    if profile is None:
        return f"<p>Hello. {links}</p>"
    return (
        f'<p>Hello, <a href="{escape(profile.profile_url)}">'
        f"{escape(profile.persona_name)}</a>. {links}</p>"
    )


def _upload_form(message: str | None, error: str | None) -> str:
    return (
        '<form action="/upload" method="POST" enctype="multipart/form-data">'
        f"<p>Frames must be png files that are {FRAME_HEIGHT}px high "
        f"and {FRAME_WIDTH}px wide.</p>"
        '<p>Download the <a href="/template.png">template</a>.</p>'
        f"{_notices(message, error)}"
        '<input type="file" name="image" accept="image/png" />'
        '<button type="submit">upload</button>'
        "</form>"
    )


def _notices(message: str | None, error: str | None) -> str:
    html = ""
    if message:
        html += f'<p class="message">{escape(message)}</p>'
    if error:
        html += f'<p class="error">{escape(error)}</p>'
    return html


def _frames_grid(frames: list[FrameRecord], viewer_id: str | None) -> str:
    if not frames:
        return '<p class="empty">No frames uploaded yet.</p>'
    items = [_frame_card(frame, viewer_id) for frame in frames]
    return f'<div class="frames">{"".join(items)}</div>'


def _frame_card(frame: FrameRecord, viewer_id: str | None) -> str:
    texture_link = escape(f"/img/{frame.texture_name}")
    html = (
        '<div class="frame-container">'
        f'<img height="200" src="/img/{escape(frame.source_name)}" />'
        f'<small>Uploaded by <a href="{escape(frame.owner_profile_url)}">'
        f"{escape(frame.owner_display_name)}</a></small>"
        f"<button onclick=\"copylink('{texture_link}', this)\">Copy link</button>"
    )
    if viewer_id is not None and viewer_id == frame.owner_id:
        delete_link = escape(f"/img/{frame.id}")
        html += (
            f"<button onclick=\"deleteFrame('{delete_link}', this)\">Delete</button>"
        )
    return html + "</div>"


def _layout(body: str) -> str:
    return _LAYOUT_HTML.replace("{body}", body)


_LAYOUT_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Custom Frames</title>
    <style>
      .frames {
        display: grid;
        justify-content: center;
        gap: 1rem;
        grid-template-columns: repeat(auto-fit, 200px);
      }
      .frame-container { width: 200px; text-align: center; }
      .frame-container small { display: block; margin-bottom: .25rem; }
      .error { color: #b00020; }
      .message { color: #1b5e20; }
    </style>
    <script>
      function copylink(path, button) {
        const url = new URL(path, window.location.origin).toString();
        navigator.clipboard.writeText(url).then(
          function () {
            const original = button.innerText;
            button.innerText = 'Copied';
            setTimeout(function () { button.innerText = original; }, 2000);
          },
          function () {
            const note = document.createElement('small');
            note.innerText = 'Copy failed. Try this: ';
            const pre = document.createElement('pre');
            pre.innerText = url;
            note.appendChild(pre);
            button.parentNode.replaceChild(note, button);
          }
        );
      }

      async function deleteFrame(link, button) {
        button.innerText = 'Deleting...';
        const res = await fetch(link, { method: 'DELETE' });
        if (res.ok) {
          const card = button.parentElement;
          card.parentElement.removeChild(card);
        } else {
          button.innerText = 'Error';
        }
      }
    </script>
  </head>
  <body>
    {body}
  </body>
</html>
"""
