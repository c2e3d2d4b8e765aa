from natsbasic.cli import run

run()
