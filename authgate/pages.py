from os.path import join, dirname

from jinja2 import Environment, FileSystemLoader, select_autoescape

env = Environment(
    loader=FileSystemLoader(join(dirname(__file__), "templates")),
    autoescape=select_autoescape(["html"]),
)

# Seconds between the starts of consecutive progress bars. Decorative only.
BAR_STAGGER = 17
BAR_FILL_SECONDS = 30


def render_landing(oauth_url: str) -> str:
    return env.get_template("landing.html").render(oauth_url=oauth_url)


def render_invite(invite_url: str) -> str:
    return env.get_template("invite.html").render(invite_url=invite_url)


def render_thanks(community_count: int, stagger: int = BAR_STAGGER) -> str:
    delays = [i * stagger for i in range(max(community_count, 0))]
    return env.get_template("thanks.html").render(delays=delays, fill_seconds=BAR_FILL_SECONDS)
