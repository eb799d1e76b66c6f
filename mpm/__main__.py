from mpm.cli import run

run()
