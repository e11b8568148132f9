"""Result records, custom and predefined fields, response storage and the output writer."""