from code_runner.supervisor import main

if __name__ == "__main__":
    main()  # one worker per core on PORT (default 3000)
