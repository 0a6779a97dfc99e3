pytest_plugins = ["pytester", "pytest_mockwrapper"]
