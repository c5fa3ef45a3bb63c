from fitbit_usage.analysis import main

main()
