from simulator.main import main

main()
