"""Hero/rescue service: an example consumer of the contract system."""
