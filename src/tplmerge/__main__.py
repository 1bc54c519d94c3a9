from tplmerge.cli import run

run()
