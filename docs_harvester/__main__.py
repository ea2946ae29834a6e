from docs_harvester.main import run

run()
