from silence_reporter.main import main

main()
