"""Newsletter service: subscriber sign-up, admin publishing and delivery."""
