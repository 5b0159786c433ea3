from .tutorial import run

run()
