from ascetic_planner.main import main


raise SystemExit(main())
