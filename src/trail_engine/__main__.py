from trail_engine.cli import main

main()
