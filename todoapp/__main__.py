from todoapp.cli import run

run()
